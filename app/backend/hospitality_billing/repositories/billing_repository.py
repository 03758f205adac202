"""Repository helpers for billing entries, products and month mappings."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from hospitality_billing.models.entities import (
    BillingEntry,
    InvoiceConfig,
    Package,
    PackageType,
    Participant,
    Product,
    Program,
    ProgramMonthMapping,
    StaffBillingEntry,
)


class BillingRepository:
    """Read operations used by reporting and invoice services."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Packages and products ----------
    def get_package(self, package_id: UUID) -> Package | None:
        return self.db.scalar(select(Package).where(Package.id == package_id))

    def list_packages_by_types(self, package_types: Iterable[PackageType]) -> list[Package]:
        types = list(package_types)
        if not types:
            return []
        return self.db.scalars(
            select(Package)
            .where(Package.type.in_(types))
            .order_by(Package.name.asc())
        ).all()

    def list_products_for_packages(self, package_ids: Iterable[UUID]) -> list[tuple[Product, Package]]:
        ids = list(package_ids)
        if not ids:
            return []
        rows = self.db.execute(
            select(Product, Package)
            .join(Package, Package.id == Product.package_id)
            .where(Product.package_id.in_(ids))
            .order_by(Product.serve_item_no.asc(), Product.name.asc())
        ).all()
        return [(product, package) for product, package in rows]

    # ---------- Programs ----------
    def get_program(self, program_id: UUID) -> Program | None:
        return self.db.scalar(select(Program).where(Program.id == program_id))

    def list_programs(self, program_ids: Iterable[UUID] | None = None) -> list[Program]:
        stmt = select(Program).order_by(Program.start_date.desc(), Program.name.asc())
        if program_ids is not None:
            ids = list(program_ids)
            if not ids:
                return []
            stmt = stmt.where(Program.id.in_(ids))
        return self.db.scalars(stmt).all()

    def list_participants(self, program_id: UUID) -> list[Participant]:
        return self.db.scalars(
            select(Participant)
            .where(Participant.program_id == program_id)
            .order_by(Participant.attendee_name.asc())
        ).all()

    # ---------- Month mappings ----------
    def list_program_ids_for_month(self, billing_month: str) -> list[UUID]:
        return self.db.scalars(
            select(ProgramMonthMapping.program_id)
            .where(ProgramMonthMapping.billing_month == billing_month)
        ).all()

    def list_billing_months_for_program(self, program_id: UUID) -> list[str]:
        return self.db.scalars(
            select(ProgramMonthMapping.billing_month)
            .where(ProgramMonthMapping.program_id == program_id)
            .order_by(ProgramMonthMapping.billing_month.asc())
        ).all()

    # ---------- Entries ----------
    def list_program_entries(
        self,
        *,
        package_ids: Iterable[UUID],
        program_ids: Iterable[UUID],
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[tuple[BillingEntry, Product]]:
        package_list = list(package_ids)
        program_list = list(program_ids)
        if not package_list or not program_list:
            return []

        conditions = [
            BillingEntry.package_id.in_(package_list),
            BillingEntry.program_id.in_(program_list),
        ]
        if from_date is not None:
            conditions.append(BillingEntry.entry_date >= from_date)
        if to_date is not None:
            conditions.append(BillingEntry.entry_date <= to_date)

        rows = self.db.execute(
            select(BillingEntry, Product)
            .join(Product, Product.id == BillingEntry.product_id)
            .where(and_(*conditions))
            .order_by(BillingEntry.entry_date.asc())
        ).all()
        return [(entry, product) for entry, product in rows]

    def list_staff_entries(
        self,
        *,
        package_ids: Iterable[UUID],
        from_date: date,
        to_date: date,
    ) -> list[tuple[StaffBillingEntry, Product]]:
        package_list = list(package_ids)
        if not package_list:
            return []

        rows = self.db.execute(
            select(StaffBillingEntry, Product)
            .join(Product, Product.id == StaffBillingEntry.product_id)
            .where(
                and_(
                    StaffBillingEntry.package_id.in_(package_list),
                    StaffBillingEntry.entry_date >= from_date,
                    StaffBillingEntry.entry_date <= to_date,
                )
            )
            .order_by(StaffBillingEntry.entry_date.asc())
        ).all()
        return [(entry, product) for entry, product in rows]

    # ---------- Invoice configuration ----------
    def get_invoice_config(self) -> InvoiceConfig | None:
        return self.db.scalar(select(InvoiceConfig).limit(1))
