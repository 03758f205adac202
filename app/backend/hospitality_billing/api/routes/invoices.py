"""Invoice generation endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hospitality_billing.api.routes.reports import ReportAction, pdf_response
from hospitality_billing.db.dependencies import get_db_session
from hospitality_billing.services.export_service import ReportRenderer, invoice_filename
from hospitality_billing.services.invoice_service import InvoiceService

router = APIRouter(prefix="/invoices", tags=["invoices"])


class InvoicePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    package_id: str | None = Field(default=None, alias="packageId")
    month: str | None = None
    type: str | None = "program"
    action: ReportAction | None = None


@router.post("/generate", response_model=None)
def generate_invoice(
    payload: InvoicePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object] | Response:
    invoice = InvoiceService(db).generate(
        package_id=payload.package_id,
        month=payload.month,
        invoice_type=payload.type,
    )
    if payload.action is None or not invoice["has_data"]:
        return invoice
    content = ReportRenderer().invoice_pdf(invoice)
    return pdf_response(content, invoice_filename(invoice), payload.action)
