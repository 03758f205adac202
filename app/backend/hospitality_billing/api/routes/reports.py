"""Consumption report endpoints returning JSON or rendered PDF documents."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hospitality_billing.db.dependencies import get_db_session
from hospitality_billing.services.export_service import ReportRenderer, pdf_filename
from hospitality_billing.services.report_service import BillingReportService

router = APIRouter(prefix="/reports", tags=["reports"])

ReportAction = Literal["print", "download"]


class ReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    package_id: str | None = Field(default=None, alias="packageId")
    action: ReportAction | None = None


class LifetimeReportPayload(ReportRequest):
    start_month: str | None = Field(default=None, alias="startMonth")
    end_month: str | None = Field(default=None, alias="endMonth")


class DayReportPayload(ReportRequest):
    month: str | None = None


class ProgramReportPayload(ReportRequest):
    program_id: str | None = Field(default=None, alias="programId")


class MonthlyReportPayload(BaseModel):
    month: str | None = None
    type: str | None = "all"
    action: ReportAction | None = None


def _service(db: Session) -> BillingReportService:
    return BillingReportService(db)


def pdf_response(content: bytes, filename: str, action: ReportAction) -> Response:
    disposition = "inline" if action == "print" else "attachment"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
    )


def _respond(report_key: str, payload: dict[str, object], action: ReportAction | None) -> dict[str, object] | Response:
    if action is None:
        return payload
    content = ReportRenderer().report_pdf(report_key, payload)
    return pdf_response(content, pdf_filename(report_key, payload), action)


@router.post("/lifetime", response_model=None)
def lifetime_report(
    payload: LifetimeReportPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object] | Response:
    report = _service(db).lifetime_report(
        start_month=payload.start_month,
        end_month=payload.end_month,
        package_id=payload.package_id,
    )
    return _respond("lifetime", report, payload.action)


@router.post("/day", response_model=None)
def day_report(
    payload: DayReportPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object] | Response:
    report = _service(db).day_report(month=payload.month, package_id=payload.package_id)
    return _respond("day", report, payload.action)


@router.post("/program", response_model=None)
def program_report(
    payload: ProgramReportPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object] | Response:
    report = _service(db).program_report(program_id=payload.program_id, package_id=payload.package_id)
    return _respond("program", report, payload.action)


@router.post("/month", response_model=None)
def monthly_report(
    payload: MonthlyReportPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object] | Response:
    report = _service(db).monthly_report(month=payload.month, report_type=payload.type)
    return _respond("month", report, payload.action)
