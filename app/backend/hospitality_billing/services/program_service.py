"""Program lookups and participant-driven slot quantities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, time
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from hospitality_billing.models.entities import Participant, Product
from hospitality_billing.repositories.billing_repository import BillingRepository
from hospitality_billing.services.billing_calendar import month_key, parse_billing_month
from hospitality_billing.services.month_mapping import MonthMappingResolver
from hospitality_billing.services.report_service import BillingReportService


def count_participants_in_slot(
    participants: Sequence[Participant],
    entry_date: date,
    slot_start: time,
    slot_end: time,
) -> int:
    """Count participants checked in on ``entry_date`` whose stay overlaps the slot."""

    window_start = datetime.combine(entry_date, slot_start)
    window_end = datetime.combine(entry_date, slot_end)
    count = 0
    for participant in participants:
        checkin = participant.reception_checkin
        checkout = participant.reception_checkout
        if checkin is None or checkout is None:
            continue
        if checkin.date() != entry_date:
            continue
        if checkin <= window_end and checkout >= window_start:
            count += 1
    return count


class ProgramService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = BillingRepository(db)
        self.resolver = MonthMappingResolver(self.repo)

    def list_programs(self, *, billing_month: str | None) -> list[dict[str, object]]:
        if billing_month:
            key = month_key(parse_billing_month(billing_month, "billing_month"))
            programs = self.repo.list_programs(self.resolver.resolve_month(key))
        else:
            programs = self.repo.list_programs()
        return [
            BillingReportService.serialize_program(program, self.repo.list_billing_months_for_program(program.id))
            for program in programs
        ]

    def slot_quantities(self, *, program_id: UUID, package_id: UUID, entry_date: date) -> dict[str, object]:
        program = self.repo.get_program(program_id)
        if program is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Program not found.")
        if self.repo.get_package(package_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found.")

        participants = self.repo.list_participants(program.id)
        products: list[Product] = [product for product, _ in self.repo.list_products_for_packages([package_id])]

        items = []
        for product in products:
            quantity = None
            if product.slot_start is not None and product.slot_end is not None:
                quantity = count_participants_in_slot(participants, entry_date, product.slot_start, product.slot_end)
            items.append(
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "slot_start": product.slot_start.isoformat(timespec="minutes") if product.slot_start else None,
                    "slot_end": product.slot_end.isoformat(timespec="minutes") if product.slot_end else None,
                    "quantity": quantity,
                }
            )
        return {
            "program_id": str(program.id),
            "package_id": str(package_id),
            "entry_date": entry_date.isoformat(),
            "participants": len(participants),
            "items": items,
        }
