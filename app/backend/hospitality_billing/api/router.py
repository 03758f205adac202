"""Top-level API router."""

from fastapi import APIRouter

from hospitality_billing.api.routes.exports import router as exports_router
from hospitality_billing.api.routes.health import router as health_router
from hospitality_billing.api.routes.invoices import router as invoices_router
from hospitality_billing.api.routes.programs import router as programs_router
from hospitality_billing.api.routes.reports import router as reports_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(programs_router)
api_router.include_router(reports_router)
api_router.include_router(invoices_router)
api_router.include_router(exports_router)
