from __future__ import annotations

from collections.abc import Generator, Iterable
from datetime import date, datetime, time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hospitality_billing.db.base import Base
from hospitality_billing.db.dependencies import get_db_session
import hospitality_billing.models.entities  # noqa: F401
from hospitality_billing.main import create_app
from hospitality_billing.models.entities import (
    BillingEntry,
    InvoiceConfig,
    Package,
    PackageType,
    Participant,
    Product,
    Program,
    ProgramMonthMapping,
    Staff,
    StaffBillingEntry,
)

TEST_TABLES = [
    Program.__table__,
    Participant.__table__,
    Staff.__table__,
    Package.__table__,
    Product.__table__,
    BillingEntry.__table__,
    StaffBillingEntry.__table__,
    ProgramMonthMapping.__table__,
    InvoiceConfig.__table__,
]


class BillingSeeder:
    """Insert reference rows and entries through the ORM session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _save(self, row):
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def package(self, name: str = "Catering", package_type: PackageType = PackageType.NORMAL) -> Package:
        return self._save(Package(name=name, type=package_type))

    def product(
        self,
        package: Package,
        name: str,
        *,
        rate: str = "100.00",
        serve_item_no: int | None = None,
        slot: tuple[time, time] | None = None,
    ) -> Product:
        return self._save(
            Product(
                package_id=package.id,
                name=name,
                rate=Decimal(rate),
                serve_item_no=serve_item_no,
                slot_start=slot[0] if slot else None,
                slot_end=slot[1] if slot else None,
            )
        )

    def program(
        self,
        name: str,
        start: date,
        end: date,
        *,
        months: Iterable[str] = (),
        customer_name: str = "",
        participants: int = 0,
    ) -> Program:
        program = self._save(
            Program(
                name=name,
                customer_name=customer_name,
                start_date=start,
                end_date=end,
                total_participants=participants,
            )
        )
        for billing_month in months:
            self.db.add(ProgramMonthMapping(program_id=program.id, billing_month=billing_month))
        self.db.commit()
        return program

    def entry(self, program: Program, product: Product, entry_date: date, quantity: int | None) -> BillingEntry:
        return self._save(
            BillingEntry(
                program_id=program.id,
                package_id=product.package_id,
                product_id=product.id,
                entry_date=entry_date,
                quantity=quantity,
            )
        )

    def staff_entry(self, product: Product, entry_date: date, quantity: int | None) -> StaffBillingEntry:
        return self._save(
            StaffBillingEntry(
                package_id=product.package_id,
                product_id=product.id,
                entry_date=entry_date,
                quantity=quantity,
            )
        )

    def participant(
        self,
        program: Program,
        name: str,
        checkin: datetime | None,
        checkout: datetime | None,
    ) -> Participant:
        return self._save(
            Participant(
                program_id=program.id,
                attendee_name=name,
                reception_checkin=checkin,
                reception_checkout=checkout,
            )
        )

    def invoice_config(self, company_name: str = "Lakeside Retreat Centre") -> InvoiceConfig:
        return self._save(
            InvoiceConfig(
                company_name=company_name,
                company_address="12 Lake Road",
                gstin="29ABCDE1234F1Z5",
                bank_name="State Bank",
                bank_account_no="000123456789",
                bank_ifsc="SBIN0000001",
            )
        )


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine, tables=TEST_TABLES)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=TEST_TABLES)


@pytest.fixture()
def seed(db_session: Session) -> BillingSeeder:
    return BillingSeeder(db_session)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
