from __future__ import annotations

from datetime import date

import pytest
from fastapi import HTTPException

from hospitality_billing.models.entities import ProgramStatus
from hospitality_billing.services.billing_calendar import (
    date_sequence,
    month_bounds,
    month_key,
    month_sequence,
    parse_billing_month,
    program_status,
    validate_month_range,
)


def test_parse_billing_month_returns_first_day() -> None:
    assert parse_billing_month("2025-02") == date(2025, 2, 1)
    assert parse_billing_month(" 2025-12 ") == date(2025, 12, 1)


@pytest.mark.parametrize("value", ["2025-13", "2025-00", "0000-01", "2025/01", "25-01", "2025-1", "January"])
def test_parse_billing_month_rejects_malformed_values(value: str) -> None:
    with pytest.raises(HTTPException) as exc_info:
        parse_billing_month(value, "startMonth")

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Invalid startMonth format. Expected format: YYYY-MM"


def test_parse_billing_month_requires_value() -> None:
    with pytest.raises(HTTPException) as exc_info:
        parse_billing_month(None)

    assert exc_info.value.detail == "month is required."


def test_validate_month_range_rejects_reversed_range() -> None:
    with pytest.raises(HTTPException) as exc_info:
        validate_month_range("2025-03", "2025-01")

    assert exc_info.value.status_code == 400
    assert "endMonth" in exc_info.value.detail


def test_month_sequence_crosses_year_boundary() -> None:
    months = month_sequence(date(2024, 11, 1), date(2025, 2, 1))

    assert [month_key(month) for month in months] == ["2024-11", "2024-12", "2025-01", "2025-02"]


def test_month_bounds_and_date_sequence_cover_leap_february() -> None:
    first_day, last_day = month_bounds(date(2024, 2, 1))

    assert (first_day, last_day) == (date(2024, 2, 1), date(2024, 2, 29))
    assert len(date_sequence(first_day, last_day)) == 29
    assert date_sequence(last_day, first_day) == []


def test_program_status_is_derived_from_today() -> None:
    start, end = date(2025, 3, 10), date(2025, 3, 12)

    assert program_status(start, end, today=date(2025, 3, 9)) is ProgramStatus.UPCOMING
    assert program_status(start, end, today=date(2025, 3, 10)) is ProgramStatus.ONGOING
    assert program_status(start, end, today=date(2025, 3, 12)) is ProgramStatus.ONGOING
    assert program_status(start, end, today=date(2025, 3, 13)) is ProgramStatus.COMPLETED


def test_month_sequence_stops_at_last_representable_month() -> None:
    months = month_sequence(date(9999, 11, 1), date(9999, 12, 1))

    assert [month_key(month) for month in months] == ["9999-11", "9999-12"]
    assert parse_billing_month("9999-12") == date(9999, 12, 1)
