"""Resolution of billing months to the programs billed in them."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

import structlog

from hospitality_billing.repositories.billing_repository import BillingRepository

logger = structlog.get_logger()


class MonthMappingResolver:
    """Look up programs attributed to a billing month.

    Program calendar dates are never consulted: a program running from May 29
    to June 2 and mapped to ``2025-06`` contributes nothing to May.
    """

    def __init__(self, repo: BillingRepository) -> None:
        self.repo = repo

    def resolve_month(self, billing_month: str) -> set[UUID]:
        program_ids = set(self.repo.list_program_ids_for_month(billing_month))
        logger.debug("billing_month_resolved", billing_month=billing_month, programs=len(program_ids))
        return program_ids

    def resolve_range(self, billing_months: Iterable[str]) -> dict[str, set[UUID]]:
        """Resolve each month independently so every program keeps its month attribution."""

        return {month: self.resolve_month(month) for month in billing_months}
