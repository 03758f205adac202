"""billing schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


package_type = postgresql.ENUM("Normal", "Extra", "Cold Drink", name="package_type", create_type=False)


def upgrade() -> None:
    package_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "programs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_participants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_programs_start_date", "programs", ["start_date"])

    op.create_table(
        "participants",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("program_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("programs.id"), nullable=False),
        sa.Column("attendee_name", sa.String(length=255), nullable=False),
        sa.Column("reception_checkin", sa.DateTime(), nullable=True),
        sa.Column("reception_checkout", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_participants_program_id", "participants", ["program_id"])

    op.create_table(
        "staff",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=True),
    )

    op.create_table(
        "packages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", package_type, nullable=False),
    )

    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("package_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("packages.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("rate", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("serve_item_no", sa.Integer(), nullable=True),
        sa.Column("slot_start", sa.Time(), nullable=True),
        sa.Column("slot_end", sa.Time(), nullable=True),
    )
    op.create_index("ix_products_package_id", "products", ["package_id"])

    op.create_table(
        "billing_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("program_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("programs.id"), nullable=False),
        sa.Column("package_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("packages.id"), nullable=False),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.UniqueConstraint(
            "program_id",
            "package_id",
            "product_id",
            "entry_date",
            name="uq_billing_entries_program_package_product_date",
        ),
        sa.CheckConstraint("quantity IS NULL OR quantity >= 0", name="ck_billing_entries_quantity_non_negative"),
    )
    op.create_index("ix_billing_entries_program_id", "billing_entries", ["program_id"])
    op.create_index("ix_billing_entries_package_id", "billing_entries", ["package_id"])

    op.create_table(
        "staff_billing_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("staff_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("staff.id"), nullable=True),
        sa.Column("package_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("packages.id"), nullable=False),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.CheckConstraint(
            "quantity IS NULL OR quantity >= 0",
            name="ck_staff_billing_entries_quantity_non_negative",
        ),
    )
    op.create_index(
        "ix_staff_billing_entries_package_date",
        "staff_billing_entries",
        ["package_id", "entry_date"],
    )

    op.create_table(
        "program_month_mappings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("program_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("programs.id"), nullable=False),
        sa.Column("billing_month", sa.String(length=7), nullable=False),
        sa.UniqueConstraint("program_id", "billing_month", name="uq_program_month_mappings_program_month"),
    )
    op.create_index("ix_program_month_mappings_billing_month", "program_month_mappings", ["billing_month"])

    op.create_table(
        "invoice_config",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("company_address", sa.String(length=1000), nullable=True),
        sa.Column("gstin", sa.String(length=32), nullable=True),
        sa.Column("contact", sa.String(length=255), nullable=True),
        sa.Column("bank_name", sa.String(length=255), nullable=True),
        sa.Column("bank_account_no", sa.String(length=64), nullable=True),
        sa.Column("bank_ifsc", sa.String(length=32), nullable=True),
        sa.Column("notes", sa.String(length=2000), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("invoice_config")
    op.drop_index("ix_program_month_mappings_billing_month", table_name="program_month_mappings")
    op.drop_table("program_month_mappings")
    op.drop_index("ix_staff_billing_entries_package_date", table_name="staff_billing_entries")
    op.drop_table("staff_billing_entries")
    op.drop_index("ix_billing_entries_package_id", table_name="billing_entries")
    op.drop_index("ix_billing_entries_program_id", table_name="billing_entries")
    op.drop_table("billing_entries")
    op.drop_index("ix_products_package_id", table_name="products")
    op.drop_table("products")
    op.drop_table("packages")
    op.drop_table("staff")
    op.drop_index("ix_participants_program_id", table_name="participants")
    op.drop_table("participants")
    op.drop_index("ix_programs_start_date", table_name="programs")
    op.drop_table("programs")

    package_type.drop(op.get_bind(), checkfirst=True)
