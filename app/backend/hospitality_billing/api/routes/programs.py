"""Program lookup endpoints used by the entry and report screens."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hospitality_billing.db.dependencies import get_db_session
from hospitality_billing.services.program_service import ProgramService

router = APIRouter(prefix="/programs", tags=["programs"])


@router.get("")
def list_programs(
    billing_month: str | None = None,
    db: Session = Depends(get_db_session),
) -> list[dict[str, object]]:
    return ProgramService(db).list_programs(billing_month=billing_month)


@router.get("/{program_id}/slot-quantities")
def slot_quantities(
    program_id: UUID,
    package_id: UUID = Query(...),
    entry_date: date = Query(...),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return ProgramService(db).slot_quantities(
        program_id=program_id,
        package_id=package_id,
        entry_date=entry_date,
    )
