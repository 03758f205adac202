"""HTML, PDF and tabular export of prepared report payloads."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from pathlib import Path

import structlog
from fastapi import HTTPException, status
from jinja2 import Environment, FileSystemLoader, select_autoescape
from xhtml2pdf import pisa

from hospitality_billing.core.config import get_settings

logger = structlog.get_logger()

EXPORT_FORMATS = {"csv", "xlsx"}
TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"


class PdfRenderError(RuntimeError):
    """Raised when HTML could not be converted into a PDF document."""


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


def _slug(value: object) -> str:
    text = re.sub(r"[^A-Za-z0-9]+", "-", str(value)).strip("-").lower()
    return text or "report"


def _format_date(value: str, pattern: str = "%d/%m/%Y") -> str:
    return date.fromisoformat(value).strftime(pattern)


def _format_month(value: str) -> str:
    return date.fromisoformat(f"{value}-01").strftime("%B %Y")


def _format_quantity(value: int) -> str:
    return str(value) if value else "-"


_environment = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_environment.filters["format_date"] = _format_date
_environment.filters["format_month"] = _format_month
_environment.filters["qty"] = _format_quantity


class ReportRenderer:
    """Render report payloads to HTML and PDF."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.env = _environment

    def render_html(self, template_name: str, **context: object) -> str:
        template = self.env.get_template(template_name)
        return template.render(currency=self.settings.currency_symbol, **context)

    @staticmethod
    def render_pdf(html: str) -> bytes:
        buffer = BytesIO()
        try:
            result = pisa.CreatePDF(html, dest=buffer, encoding="utf-8")
            if result.err:
                raise PdfRenderError(f"PDF renderer reported {result.err} error(s).")
            return buffer.getvalue()
        except PdfRenderError:
            logger.error("pdf_render_failed")
            raise
        except Exception as exc:
            logger.exception("pdf_render_failed")
            raise PdfRenderError(str(exc)) from exc
        finally:
            buffer.close()

    def report_pdf(self, report_key: str, payload: dict[str, object]) -> bytes:
        return self.render_pdf(self.render_html(f"{report_key}_report.html", report=payload))

    def invoice_pdf(self, payload: dict[str, object]) -> bytes:
        return self.render_pdf(self.render_html("invoice.html", invoice=payload))


def pdf_filename(report_key: str, payload: dict[str, object]) -> str:
    if report_key == "lifetime":
        months = payload["data"]["months"]
        return f"lifetime-report-{months[0]}-to-{months[-1]}.pdf"
    if report_key == "day":
        return f"day-report-{payload['month']}.pdf"
    if report_key == "program":
        return f"program-report-{_slug(payload['program']['name'])}.pdf"
    if report_key == "month":
        return f"monthly-report-{payload['month']}-{payload['type']}.pdf"
    return f"{report_key}.pdf"


def invoice_filename(payload: dict[str, object]) -> str:
    stamp = payload["invoice"]["invoice_date"].replace("-", "")
    return f"Invoice-{stamp}-{_slug(payload['package']['name'])}.pdf"


def _product_rows(report_key: str, payload: dict[str, object]) -> tuple[list[str], list[tuple[str, list[int]]]]:
    """Flatten a report payload into bucket labels and per-product quantity rows."""

    if report_key == "lifetime":
        data = payload["data"]
        buckets = list(data["active_months"])
        rows = [
            (product["name"], [product["monthlyQuantities"].get(month, 0) for month in buckets])
            for product in data["package"]["products"]
        ]
        return buckets, rows

    buckets = list(payload["active_dates"])
    matrix = payload["matrix"]
    rows = []
    for section in payload["packages"]:
        for product in section["products"]:
            rows.append((product["name"], [matrix.get(bucket, {}).get(product["id"], 0) for bucket in buckets]))
    return buckets, rows


def _filter_context(report_key: str, payload: dict[str, object]) -> str:
    if report_key == "lifetime":
        data = payload["data"]
        return f"{_slug(data['package']['name'])}-{data['months'][0]}-to-{data['months'][-1]}"
    if report_key == "program":
        return f"{_slug(payload['program']['name'])}-{_slug(payload['package']['name'])}"
    return f"{_slug(payload['package']['name'])}-{payload['month']}"


def export_report(report_key: str, format_name: str, payload: dict[str, object]) -> ExportFilePayload:
    normalized_format = format_name.strip().lower()
    if normalized_format not in EXPORT_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="format must be one of: csv, xlsx.",
        )

    buckets, rows = _product_rows(report_key, payload)
    header = ["Product Name", *buckets, "Total"]
    table = [[name, *quantities, sum(quantities)] for name, quantities in rows]
    base_filename = f"{report_key}-report-{_filter_context(report_key, payload)}"

    if normalized_format == "csv":
        import csv
        import io

        sio = io.StringIO()
        writer = csv.writer(sio)
        writer.writerow(header)
        writer.writerows(table)
        return ExportFilePayload(
            media_type="text/csv; charset=utf-8",
            filename=f"{base_filename}.csv",
            content=sio.getvalue().encode("utf-8"),
        )

    # XLSX
    from openpyxl import Workbook

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "report"
    sheet.append(header)
    for row in table:
        sheet.append(row)

    output = BytesIO()
    workbook.save(output)
    return ExportFilePayload(
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=f"{base_filename}.xlsx",
        content=output.getvalue(),
    )
