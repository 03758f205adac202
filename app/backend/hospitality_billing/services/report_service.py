"""Consumption reports built from billing entries and month mappings."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

import structlog
from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hospitality_billing.core.config import get_settings
from hospitality_billing.models.entities import Package, PackageType, Program
from hospitality_billing.repositories.billing_repository import BillingRepository
from hospitality_billing.services.aggregation import (
    EntryAggregator,
    EntryRecord,
    ProductInfo,
    ReportMatrix,
    parse_package_selector,
)
from hospitality_billing.services.billing_calendar import (
    date_sequence,
    month_bounds,
    month_key,
    month_sequence,
    parse_billing_month,
    program_status,
    validate_month_range,
)
from hospitality_billing.services.month_mapping import MonthMappingResolver
from hospitality_billing.services.report_layout import (
    PACKAGE_TYPE_DISPLAY,
    ReportChunk,
    active_buckets,
    active_products,
    boundary_flag,
    build_chunks,
    chunk_buckets,
    columns_per_table,
    group_by_package_type,
    order_products,
)

logger = structlog.get_logger()

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
Q1 = Decimal("0.1")

MONTHLY_REPORT_TYPES = {"all", "normal"}


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def _amount(quantity: int, rate: Decimal) -> Decimal:
    return _q2(Decimal(quantity) * rate)


def parse_uuid(value: str | UUID | None, field_name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    if value is None or not str(value).strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field_name} is required.")
    try:
        return UUID(str(value).strip())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field_name} must be a valid id.",
        ) from exc


def _by_entry_date(record: EntryRecord) -> str:
    return record.entry_date.isoformat()


class BillingReportService:
    """Service implementing lifetime, day, program and monthly reports."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = BillingRepository(db)
        self.settings = get_settings()
        self.resolver = MonthMappingResolver(self.repo)
        self.aggregator = EntryAggregator(self.repo, self.settings.all_package_types)

    # ---------- Serialization ----------
    @staticmethod
    def serialize_package(packages: Sequence[Package], package_id: str | None) -> dict[str, object]:
        if parse_package_selector(package_id) is None:
            return {"id": "all", "name": "All Packages", "type": "all"}
        package = packages[0]
        return {"id": str(package.id), "name": package.name, "type": PackageType(package.type).value}

    @staticmethod
    def serialize_program(program: Program, billing_months: list[str] | None = None) -> dict[str, object]:
        return {
            "id": str(program.id),
            "name": program.name,
            "customer_name": program.customer_name,
            "start_date": program.start_date.isoformat(),
            "end_date": program.end_date.isoformat(),
            "total_participants": program.total_participants,
            "status": program_status(program.start_date, program.end_date).value,
            "billing_months": billing_months or [],
        }

    def _table_width(self, package_type: PackageType) -> int:
        return columns_per_table(
            package_type,
            catering_columns=self.settings.catering_columns_per_table,
            wide_columns=self.settings.wide_columns_per_table,
        )

    @staticmethod
    def _serialize_chunk(
        matrix: ReportMatrix,
        chunk: ReportChunk,
        flag_for: Callable[[str], str | None] | None = None,
    ) -> dict[str, object]:
        product_ids = [product.id for product in chunk.products]
        rows = []
        for bucket in chunk.buckets:
            quantities = [matrix.quantity(bucket, pid) for pid in product_ids]
            row_total = sum(quantities)
            rows.append(
                {
                    "bucket": bucket,
                    "flag": flag_for(bucket) if flag_for else None,
                    "quantities": quantities,
                    "total": row_total,
                    "average": str((Decimal(row_total) / len(product_ids)).quantize(Q1)),
                }
            )
        return {
            "products": [{"id": str(p.id), "name": p.name} for p in chunk.products],
            "rows": rows,
            "totals": [matrix.product_total(pid, chunk.buckets) for pid in product_ids],
        }

    def _package_sections(
        self,
        matrix: ReportMatrix,
        products: Iterable[ProductInfo],
        buckets: Sequence[str],
        flag_for: Callable[[str], str | None] | None = None,
    ) -> list[dict[str, object]]:
        sections: list[dict[str, object]] = []
        for package_type, ordered in group_by_package_type(products, matrix.serve_item_nos):
            chunks = build_chunks(matrix, ordered, buckets, self._table_width(package_type))
            if not chunks:
                continue

            product_rows = []
            package_total = ZERO
            for product in active_products(matrix, ordered, buckets):
                quantity = matrix.product_total(product.id, buckets)
                amount = _amount(quantity, product.rate)
                package_total += amount
                product_rows.append(
                    {
                        "id": str(product.id),
                        "name": product.name,
                        "serve_item_no": matrix.serve_item_nos.get(product.id, product.serve_item_no),
                        "rate": str(_q2(product.rate)),
                        "total_quantity": quantity,
                        "amount": str(amount),
                    }
                )

            sections.append(
                {
                    "package_type": package_type.value,
                    "title": PACKAGE_TYPE_DISPLAY.get(package_type, package_type.value.upper()),
                    "products": product_rows,
                    "tables": [self._serialize_chunk(matrix, chunk, flag_for) for chunk in chunks],
                    "total_amount": str(_q2(package_total)),
                }
            )
        return sections

    # ---------- Lifetime ----------
    def lifetime_report(
        self,
        *,
        start_month: str | None,
        end_month: str | None,
        package_id: str | None,
    ) -> dict[str, object]:
        report_from, report_to = validate_month_range(start_month, end_month)
        packages = self.aggregator.resolve_packages(package_id)
        package_ids = [package.id for package in packages]
        products = self.aggregator.products_for(packages)

        month_starts = month_sequence(report_from, report_to)
        months = [month_key(month) for month in month_starts]
        matrix = ReportMatrix(months)

        debug: dict[str, object] = {
            "months_requested": len(months),
            "months_processed": 0,
            "failed_months": [],
            "programs_by_month": {},
            "program_entries_processed": 0,
            "staff_entries_processed": 0,
        }
        for month_start, key in zip(month_starts, months):
            first_day, last_day = month_bounds(month_start)
            try:
                program_ids = self.resolver.resolve_month(key)
                program_records = self.aggregator.program_records(
                    package_ids=package_ids,
                    program_ids=program_ids,
                )
                staff_records = self.aggregator.staff_records(
                    package_ids=package_ids,
                    from_date=first_day,
                    to_date=last_day,
                )
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.warning("lifetime_month_failed", billing_month=key, error=str(exc))
                debug["failed_months"].append(key)
                continue

            # Program quantities belong to the billing month, not the entry date.
            debug["program_entries_processed"] += matrix.accumulate(program_records, lambda _r, bucket=key: bucket)
            debug["staff_entries_processed"] += matrix.accumulate(staff_records, lambda _r, bucket=key: bucket)
            debug["programs_by_month"][key] = len(program_ids)
            debug["months_processed"] += 1

        if debug["failed_months"]:
            logger.warning(
                "lifetime_report_partial",
                failed_months=debug["failed_months"],
                months_requested=len(months),
            )

        ordered = [
            product
            for _, group in group_by_package_type(products, matrix.serve_item_nos)
            for product in group
        ]
        active_months = active_buckets(matrix, months, (product.id for product in products))
        product_rows = [
            {
                "id": str(product.id),
                "name": product.name,
                "serve_item_no": matrix.serve_item_nos.get(product.id, product.serve_item_no),
                "monthlyQuantities": {month: matrix.quantity(month, product.id) for month in months},
                "total": matrix.product_total(product.id, months),
            }
            for product in active_products(matrix, ordered, months)
        ]

        package_payload = self.serialize_package(packages, package_id)
        package_payload["products"] = product_rows
        return {
            "data": {
                "package": package_payload,
                "months": months,
                "active_months": active_months,
                "month_tables": chunk_buckets(active_months, self.settings.lifetime_months_per_table),
                "has_data": bool(product_rows),
                "debug": debug,
            }
        }

    # ---------- Day ----------
    def day_report(self, *, month: str | None, package_id: str | None) -> dict[str, object]:
        month_start = parse_billing_month(month, "month")
        key = month_key(month_start)
        first_day, last_day = month_bounds(month_start)
        packages = self.aggregator.resolve_packages(package_id)
        package_ids = [package.id for package in packages]
        products = self.aggregator.products_for(packages)

        program_ids = self.resolver.resolve_month(key)
        program_records = self.aggregator.program_records(package_ids=package_ids, program_ids=program_ids)
        staff_records = self.aggregator.staff_records(
            package_ids=package_ids,
            from_date=first_day,
            to_date=last_day,
        )

        # Mapped programs may carry entries dated outside the calendar month.
        entry_dates = [record.entry_date for record in program_records]
        range_start = min([first_day, *entry_dates])
        range_end = max([last_day, *entry_dates])
        matrix = ReportMatrix(day.isoformat() for day in date_sequence(range_start, range_end))
        program_processed = matrix.accumulate(program_records, _by_entry_date)
        staff_processed = matrix.accumulate(staff_records, _by_entry_date)

        dates = matrix.bucket_keys()
        sections = self._package_sections(matrix, products, dates)
        return {
            "report_key": "day",
            "month": key,
            "package": self.serialize_package(packages, package_id),
            "dates": dates,
            "active_dates": active_buckets(matrix, dates, (product.id for product in products)),
            "matrix": matrix.as_dict(),
            "packages": sections,
            "has_data": bool(sections),
            "debug": {
                "programs_mapped": len(program_ids),
                "program_entries_processed": program_processed,
                "staff_entries_processed": staff_processed,
            },
        }

    # ---------- Program ----------
    def program_report(self, *, program_id: str | None, package_id: str | None) -> dict[str, object]:
        program = self.repo.get_program(parse_uuid(program_id, "programId"))
        if program is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Program not found.")

        packages = self.aggregator.resolve_packages(package_id)
        products = self.aggregator.products_for(packages)
        records = self.aggregator.program_records(
            package_ids=[package.id for package in packages],
            program_ids=[program.id],
        )

        entry_dates = [record.entry_date for record in records]
        range_start = min([program.start_date, *entry_dates])
        range_end = max([program.end_date, *entry_dates])
        matrix = ReportMatrix(day.isoformat() for day in date_sequence(range_start, range_end))
        processed = matrix.accumulate(records, _by_entry_date)

        def flag_for(bucket: str) -> str | None:
            return boundary_flag(date.fromisoformat(bucket), program.start_date, program.end_date)

        dates = matrix.bucket_keys()
        active_dates = active_buckets(matrix, dates, (product.id for product in products))
        sections = self._package_sections(matrix, products, dates, flag_for)
        grand_total = sum((Decimal(section["total_amount"]) for section in sections), ZERO)
        return {
            "report_key": "program",
            "program": self.serialize_program(program, self.repo.list_billing_months_for_program(program.id)),
            "package": self.serialize_package(packages, package_id),
            "dates": dates,
            "active_dates": active_dates,
            "extra_dates": [
                {"date": bucket, "flag": flag_for(bucket)}
                for bucket in active_dates
                if flag_for(bucket) is not None
            ],
            "matrix": matrix.as_dict(),
            "packages": sections,
            "grand_total": str(_q2(grand_total)),
            "has_data": bool(sections),
            "debug": {"program_entries_processed": processed},
        }

    # ---------- Monthly ----------
    def monthly_report(self, *, month: str | None, report_type: str | None) -> dict[str, object]:
        month_start = parse_billing_month(month, "month")
        key = month_key(month_start)
        normalized_type = (report_type or "all").strip().lower()
        if normalized_type not in MONTHLY_REPORT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="type must be one of: all, normal.",
            )

        program_ids = self.resolver.resolve_month(key)
        programs = self.repo.list_programs(program_ids)
        packages = self.aggregator.resolve_packages(None)
        if normalized_type == "normal":
            packages = [package for package in packages if PackageType(package.type) is PackageType.NORMAL]
        products = {product.id: product for product in self.aggregator.products_for(packages)}
        records = self.aggregator.program_records(
            package_ids=[package.id for package in packages],
            program_ids=program_ids,
        )

        by_program: dict[UUID, ReportMatrix] = {}
        for record in records:
            if record.program_id is None or record.product_id not in products:
                continue
            by_program.setdefault(record.program_id, ReportMatrix([key])).accumulate([record], lambda _r: key)

        programs_sorted = sorted(programs, key=lambda row: row.name.lower())
        if normalized_type == "all":
            rows = []
            grand_total = ZERO
            for program in programs_sorted:
                matrix = by_program.get(program.id)
                totals = {package_type: ZERO for package_type in PackageType}
                if matrix is not None:
                    for product_id, quantity in matrix.cells[key].items():
                        product = products[product_id]
                        totals[product.package_type] += _amount(quantity, product.rate)
                program_total = _q2(sum(totals.values(), ZERO))
                grand_total += program_total
                rows.append(
                    {
                        "program_id": str(program.id),
                        "program": program.name,
                        "catering_total": str(_q2(totals[PackageType.NORMAL])),
                        "extra_total": str(_q2(totals[PackageType.EXTRA])),
                        "cold_drink_total": str(_q2(totals[PackageType.COLD_DRINK])),
                        "grand_total": str(program_total),
                    }
                )
            return {
                "report_key": "month",
                "month": key,
                "type": normalized_type,
                "rows": rows,
                "grand_total": str(_q2(grand_total)),
                "has_data": bool(records),
            }

        catering_products = order_products(list(products.values()), PackageType.NORMAL)
        combined = ReportMatrix([key])
        for matrix in by_program.values():
            for product_id, quantity in matrix.cells[key].items():
                combined.add(key, product_id, quantity)
        columns = active_products(combined, catering_products, [key])

        rows = []
        for program in programs_sorted:
            matrix = by_program.get(program.id) or ReportMatrix([key])
            quantities = [matrix.quantity(key, product.id) for product in columns]
            rows.append(
                {
                    "program_id": str(program.id),
                    "program": program.name,
                    "quantities": quantities,
                    "total": sum(quantities),
                }
            )
        return {
            "report_key": "month",
            "month": key,
            "type": normalized_type,
            "products": [{"id": str(product.id), "name": product.name} for product in columns],
            "rows": rows,
            "totals": [combined.quantity(key, product.id) for product in columns],
            "has_data": bool(records),
        }
