"""ORM entities for the billing and reporting schema."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hospitality_billing.db.base import Base


class PackageType(str, enum.Enum):
    NORMAL = "Normal"
    EXTRA = "Extra"
    COLD_DRINK = "Cold Drink"


class ProgramStatus(str, enum.Enum):
    UPCOMING = "Upcoming"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"


class Program(Base):
    __tablename__ = "programs"
    __table_args__ = (Index("ix_programs_start_date", "start_date"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class Participant(Base):
    __tablename__ = "participants"
    __table_args__ = (Index("ix_participants_program_id", "program_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    program_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("programs.id"), nullable=False)
    attendee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    reception_checkin: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    reception_checkout: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class Staff(Base):
    __tablename__ = "staff"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)


class Package(Base):
    __tablename__ = "packages"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[PackageType] = mapped_column(
        SQLEnum(
            PackageType,
            name="package_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (Index("ix_products_package_id", "package_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    package_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("packages.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    serve_item_no: Mapped[int | None] = mapped_column(Integer, nullable=True)
    slot_start: Mapped[time | None] = mapped_column(Time, nullable=True)
    slot_end: Mapped[time | None] = mapped_column(Time, nullable=True)


class BillingEntry(Base):
    __tablename__ = "billing_entries"
    __table_args__ = (
        UniqueConstraint(
            "program_id",
            "package_id",
            "product_id",
            "entry_date",
            name="uq_billing_entries_program_package_product_date",
        ),
        Index("ix_billing_entries_program_id", "program_id"),
        Index("ix_billing_entries_package_id", "package_id"),
        CheckConstraint("quantity IS NULL OR quantity >= 0", name="ck_billing_entries_quantity_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    program_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("programs.id"), nullable=False)
    package_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("packages.id"), nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("products.id"), nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)


class StaffBillingEntry(Base):
    __tablename__ = "staff_billing_entries"
    __table_args__ = (
        Index("ix_staff_billing_entries_package_date", "package_id", "entry_date"),
        CheckConstraint(
            "quantity IS NULL OR quantity >= 0",
            name="ck_staff_billing_entries_quantity_non_negative",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    staff_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), ForeignKey("staff.id"), nullable=True)
    package_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("packages.id"), nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("products.id"), nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)


class ProgramMonthMapping(Base):
    __tablename__ = "program_month_mappings"
    __table_args__ = (
        UniqueConstraint("program_id", "billing_month", name="uq_program_month_mappings_program_month"),
        Index("ix_program_month_mappings_billing_month", "billing_month"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    program_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("programs.id"), nullable=False)
    # YYYY-MM
    billing_month: Mapped[str] = mapped_column(String(7), nullable=False)


class InvoiceConfig(Base):
    __tablename__ = "invoice_config"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_address: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    gstin: Mapped[str | None] = mapped_column(String(32), nullable=True)
    contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bank_account_no: Mapped[str | None] = mapped_column(String(64), nullable=True)
    bank_ifsc: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
