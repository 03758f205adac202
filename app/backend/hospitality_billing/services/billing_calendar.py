"""Billing month parsing and calendar sequences."""

from __future__ import annotations

import calendar
import re
from datetime import MAXYEAR, MINYEAR, date, timedelta

from fastapi import HTTPException, status

from hospitality_billing.models.entities import ProgramStatus

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def parse_billing_month(value: str | None, field_name: str = "month") -> date:
    """Parse ``YYYY-MM`` into the first day of that month."""

    if value is None or not str(value).strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field_name} is required.",
        )
    match = MONTH_PATTERN.match(str(value).strip())
    if match is None or int(match.group(1)) < MINYEAR or not 1 <= int(match.group(2)) <= 12:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field_name} format. Expected format: YYYY-MM",
        )
    return date(int(match.group(1)), int(match.group(2)), 1)


def validate_month_range(start_month: str | None, end_month: str | None) -> tuple[date, date]:
    start = parse_billing_month(start_month, "startMonth")
    end = parse_billing_month(end_month, "endMonth")
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="endMonth must be greater than or equal to startMonth.",
        )
    return start, end


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_bounds(month_start: date) -> tuple[date, date]:
    last_day = calendar.monthrange(month_start.year, month_start.month)[1]
    return date(month_start.year, month_start.month, 1), date(month_start.year, month_start.month, last_day)


def month_sequence(start_month: date, end_month: date) -> list[date]:
    current = date(start_month.year, start_month.month, 1)
    end = date(end_month.year, end_month.month, 1)
    months: list[date] = []
    while current <= end:
        months.append(current)
        if current.year == MAXYEAR and current.month == 12:
            break
        if current.month == 12:
            current = date(current.year + 1, 1, 1)
        else:
            current = date(current.year, current.month + 1, 1)
    return months


def date_sequence(start: date, end: date) -> list[date]:
    days: list[date] = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def program_status(start_date: date, end_date: date, today: date | None = None) -> ProgramStatus:
    """Derive program status from the current date."""

    current = today or date.today()
    if current < start_date:
        return ProgramStatus.UPCOMING
    if current > end_date:
        return ProgramStatus.COMPLETED
    return ProgramStatus.ONGOING
