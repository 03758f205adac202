"""ORM model package."""

from hospitality_billing.models.entities import (
    BillingEntry,
    InvoiceConfig,
    Package,
    PackageType,
    Participant,
    Product,
    Program,
    ProgramMonthMapping,
    ProgramStatus,
    Staff,
    StaffBillingEntry,
)

__all__ = [
    "BillingEntry",
    "InvoiceConfig",
    "Package",
    "PackageType",
    "Participant",
    "Product",
    "Program",
    "ProgramMonthMapping",
    "ProgramStatus",
    "Staff",
    "StaffBillingEntry",
]
