"""Invoice calculation for one package and billing month."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

import structlog
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from hospitality_billing.core.config import get_settings
from hospitality_billing.models.entities import InvoiceConfig, Package, PackageType
from hospitality_billing.repositories.billing_repository import BillingRepository
from hospitality_billing.services.aggregation import EntryAggregator, EntryRecord, ProductInfo
from hospitality_billing.services.billing_calendar import month_bounds, month_key, parse_billing_month
from hospitality_billing.services.month_mapping import MonthMappingResolver
from hospitality_billing.services.report_service import parse_uuid

logger = structlog.get_logger()

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")

INVOICE_TYPES = {"staff", "program"}


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


@dataclass(slots=True)
class InvoiceLine:
    product_id: UUID
    name: str
    rate: Decimal
    serve_item_no: int | None
    quantity: int = 0

    @property
    def total(self) -> Decimal:
        return _q2(Decimal(self.quantity) * self.rate)


@dataclass(slots=True)
class InvoiceComputation:
    package: Package
    billing_month: str
    invoice_type: str
    lines: list[InvoiceLine] = field(default_factory=list)
    program_names: list[str] = field(default_factory=list)
    customer_names: list[str] = field(default_factory=list)

    @property
    def grand_total(self) -> Decimal:
        return _q2(sum((line.total for line in self.lines), ZERO))


def collapse_invoice_lines(records: list[EntryRecord], products: dict[UUID, ProductInfo]) -> list[InvoiceLine]:
    """Fold entries into one line per product, ordered by serve index."""

    lines: dict[UUID, InvoiceLine] = {}
    for record in records:
        product = products.get(record.product_id)
        if product is None:
            continue
        line = lines.get(record.product_id)
        if line is None:
            line = InvoiceLine(
                product_id=product.id,
                name=product.name,
                rate=_q2(product.rate),
                serve_item_no=product.serve_item_no,
            )
            lines[record.product_id] = line
        line.quantity += record.quantity
        if record.serve_item_no is not None:
            line.serve_item_no = record.serve_item_no

    return sorted(lines.values(), key=lambda row: row.serve_item_no or 0)


class InvoiceService:
    """Service computing invoice payloads from program or staff entries."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = BillingRepository(db)
        self.settings = get_settings()
        self.resolver = MonthMappingResolver(self.repo)
        self.aggregator = EntryAggregator(self.repo, self.settings.all_package_types)

    @staticmethod
    def serialize_config(config: InvoiceConfig | None) -> dict[str, object] | None:
        if config is None:
            return None
        return {
            "company_name": config.company_name,
            "company_address": config.company_address,
            "gstin": config.gstin,
            "contact": config.contact,
            "bank_name": config.bank_name,
            "bank_account_no": config.bank_account_no,
            "bank_ifsc": config.bank_ifsc,
            "notes": config.notes,
        }

    def compute(self, *, package_id: str | None, month: str | None, invoice_type: str | None) -> InvoiceComputation:
        normalized_type = (invoice_type or "program").strip().lower()
        if normalized_type not in INVOICE_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="type must be one of: staff, program.",
            )
        month_start = parse_billing_month(month, "month")
        key = month_key(month_start)
        package = self.repo.get_package(parse_uuid(package_id, "packageId"))
        if package is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found.")

        products = {product.id: product for product in self.aggregator.products_for([package])}
        computation = InvoiceComputation(package=package, billing_month=key, invoice_type=normalized_type)

        if normalized_type == "staff":
            first_day, last_day = month_bounds(month_start)
            records = self.aggregator.staff_records(
                package_ids=[package.id],
                from_date=first_day,
                to_date=last_day,
            )
        else:
            program_ids = self.resolver.resolve_month(key)
            if not program_ids:
                logger.info("invoice_no_programs_mapped", billing_month=key, package_id=str(package.id))
                return computation
            records = self.aggregator.program_records(package_ids=[package.id], program_ids=program_ids)
            programs = self.repo.list_programs({record.program_id for record in records if record.program_id})
            computation.program_names = sorted(program.name for program in programs)
            computation.customer_names = sorted({program.customer_name for program in programs if program.customer_name})

        computation.lines = collapse_invoice_lines(records, products)
        return computation

    def generate(self, *, package_id: str | None, month: str | None, invoice_type: str | None) -> dict[str, object]:
        computation = self.compute(package_id=package_id, month=month, invoice_type=invoice_type)
        package_payload = {
            "id": str(computation.package.id),
            "name": computation.package.name,
            "type": PackageType(computation.package.type).value,
        }
        if not computation.lines:
            return {
                "has_data": False,
                "message": f"No data for billing month {computation.billing_month} in package {computation.package.name}.",
                "package": package_payload,
                "month": computation.billing_month,
                "type": computation.invoice_type,
                "invoice": None,
            }

        return {
            "has_data": True,
            "message": None,
            "package": package_payload,
            "month": computation.billing_month,
            "type": computation.invoice_type,
            "invoice": {
                "invoice_date": date.today().isoformat(),
                "programs": computation.program_names,
                "customers": computation.customer_names,
                "lines": [
                    {
                        "product_id": str(line.product_id),
                        "name": line.name,
                        "serve_item_no": line.serve_item_no,
                        "quantity": line.quantity,
                        "rate": str(line.rate),
                        "total": str(line.total),
                    }
                    for line in computation.lines
                ],
                "grand_total": str(computation.grand_total),
                "config": self.serialize_config(self.repo.get_invoice_config()),
            },
        }
