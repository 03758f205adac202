"""Entry aggregation into dense bucket x product matrices."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status

from hospitality_billing.models.entities import (
    BillingEntry,
    Package,
    PackageType,
    Product,
    StaffBillingEntry,
)
from hospitality_billing.repositories.billing_repository import BillingRepository

ALL_PACKAGES = "all"


class EntrySource(str, enum.Enum):
    PROGRAM = "program"
    STAFF = "staff"


@dataclass(frozen=True, slots=True)
class ProductInfo:
    id: UUID
    name: str
    rate: Decimal
    package_id: UUID
    package_type: PackageType
    serve_item_no: int | None = None

    @classmethod
    def from_rows(cls, product: Product, package: Package) -> ProductInfo:
        return cls(
            id=product.id,
            name=product.name,
            rate=Decimal(product.rate or 0),
            package_id=package.id,
            package_type=PackageType(package.type),
            serve_item_no=product.serve_item_no,
        )


@dataclass(frozen=True, slots=True)
class EntryRecord:
    source: EntrySource
    product_id: UUID
    entry_date: date
    quantity: int
    serve_item_no: int | None = None
    program_id: UUID | None = None


def _coerce_quantity(value: int | None) -> int:
    if value is None:
        return 0
    quantity = int(value)
    if quantity < 0:
        raise ValueError(f"Billing quantity must be non-negative, got {quantity}.")
    return quantity


def program_entry_record(entry: BillingEntry, product: Product) -> EntryRecord:
    return EntryRecord(
        source=EntrySource.PROGRAM,
        product_id=entry.product_id,
        entry_date=entry.entry_date,
        quantity=_coerce_quantity(entry.quantity),
        serve_item_no=product.serve_item_no,
        program_id=entry.program_id,
    )


def staff_entry_record(entry: StaffBillingEntry, product: Product) -> EntryRecord:
    return EntryRecord(
        source=EntrySource.STAFF,
        product_id=entry.product_id,
        entry_date=entry.entry_date,
        quantity=_coerce_quantity(entry.quantity),
        serve_item_no=product.serve_item_no,
    )


class ReportMatrix:
    """Quantities keyed by bucket (date or month string) then product id."""

    def __init__(self, bucket_keys: Iterable[str] = ()) -> None:
        self.cells: dict[str, dict[UUID, int]] = {key: {} for key in bucket_keys}
        self.serve_item_nos: dict[UUID, int] = {}

    def ensure_bucket(self, bucket: str) -> dict[UUID, int]:
        return self.cells.setdefault(bucket, {})

    def add(self, bucket: str, product_id: UUID, quantity: int) -> None:
        row = self.ensure_bucket(bucket)
        row[product_id] = row.get(product_id, 0) + quantity

    def quantity(self, bucket: str, product_id: UUID) -> int:
        return self.cells.get(bucket, {}).get(product_id, 0)

    def bucket_keys(self) -> list[str]:
        return sorted(self.cells.keys())

    def product_total(self, product_id: UUID, buckets: Iterable[str] | None = None) -> int:
        keys = self.bucket_keys() if buckets is None else buckets
        return sum(self.quantity(key, product_id) for key in keys)

    def bucket_total(self, bucket: str, product_ids: Iterable[UUID]) -> int:
        return sum(self.quantity(bucket, product_id) for product_id in product_ids)

    def accumulate(self, records: Iterable[EntryRecord], bucket_for: Callable[[EntryRecord], str]) -> int:
        """Add every record into its bucket and return how many were processed."""

        processed = 0
        for record in records:
            self.add(bucket_for(record), record.product_id, record.quantity)
            if record.serve_item_no is not None:
                self.serve_item_nos[record.product_id] = record.serve_item_no
            processed += 1
        return processed

    def as_dict(self) -> dict[str, dict[str, int]]:
        return {
            bucket: {str(product_id): qty for product_id, qty in self.cells[bucket].items()}
            for bucket in self.bucket_keys()
        }


def parse_package_selector(package_id: str | None) -> UUID | None:
    """Return a package UUID, or ``None`` for the ``all`` sentinel."""

    if package_id is None or str(package_id).strip().lower() in {"", ALL_PACKAGES}:
        return None
    try:
        return UUID(str(package_id).strip())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="packageId must be a package id or 'all'.",
        ) from exc


class EntryAggregator:
    """Fetch program and staff entry streams and fold them into matrices."""

    def __init__(self, repo: BillingRepository, all_package_types: Iterable[str]) -> None:
        self.repo = repo
        self.all_package_types = [PackageType(value) for value in all_package_types]

    def resolve_packages(self, package_id: str | None) -> list[Package]:
        selected = parse_package_selector(package_id)
        if selected is None:
            return self.repo.list_packages_by_types(self.all_package_types)
        package = self.repo.get_package(selected)
        if package is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found.")
        return [package]

    def products_for(self, packages: Iterable[Package]) -> list[ProductInfo]:
        return [
            ProductInfo.from_rows(product, package)
            for product, package in self.repo.list_products_for_packages(package.id for package in packages)
        ]

    def program_records(
        self,
        *,
        package_ids: Iterable[UUID],
        program_ids: Iterable[UUID],
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[EntryRecord]:
        rows = self.repo.list_program_entries(
            package_ids=package_ids,
            program_ids=program_ids,
            from_date=from_date,
            to_date=to_date,
        )
        return [program_entry_record(entry, product) for entry, product in rows]

    def staff_records(self, *, package_ids: Iterable[UUID], from_date: date, to_date: date) -> list[EntryRecord]:
        rows = self.repo.list_staff_entries(package_ids=package_ids, from_date=from_date, to_date=to_date)
        return [staff_entry_record(entry, product) for entry, product in rows]
