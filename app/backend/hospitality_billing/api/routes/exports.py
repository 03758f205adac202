"""Export endpoint for report datasets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hospitality_billing.db.dependencies import get_db_session
from hospitality_billing.services.export_service import export_report as build_export
from hospitality_billing.services.report_service import BillingReportService

router = APIRouter(prefix="/exports", tags=["exports"])

EXPORTABLE_REPORTS = ("day", "program", "lifetime")


class ExportPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    package_id: str | None = Field(default=None, alias="packageId")
    month: str | None = None
    start_month: str | None = Field(default=None, alias="startMonth")
    end_month: str | None = Field(default=None, alias="endMonth")
    program_id: str | None = Field(default=None, alias="programId")


def _service(db: Session) -> BillingReportService:
    return BillingReportService(db)


@router.post("/{report_key}")
def export_report(
    report_key: str,
    payload: ExportPayload,
    format: str = Query(default="xlsx"),
    db: Session = Depends(get_db_session),
) -> Response:
    service = _service(db)
    if report_key == "day":
        report = service.day_report(month=payload.month, package_id=payload.package_id)
    elif report_key == "program":
        report = service.program_report(program_id=payload.program_id, package_id=payload.package_id)
    elif report_key == "lifetime":
        report = service.lifetime_report(
            start_month=payload.start_month,
            end_month=payload.end_month,
            package_id=payload.package_id,
        )
    else:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown report '{report_key}'. Exportable reports: {', '.join(EXPORTABLE_REPORTS)}.",
        )

    exported = build_export(report_key, format, report)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
