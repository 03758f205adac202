from __future__ import annotations

import uuid
from datetime import date

import pytest
from fastapi import HTTPException

from hospitality_billing.models.entities import PackageType
from hospitality_billing.repositories.billing_repository import BillingRepository
from hospitality_billing.services.aggregation import (
    EntryAggregator,
    EntryRecord,
    EntrySource,
    ReportMatrix,
    _coerce_quantity,
    parse_package_selector,
)
from hospitality_billing.services.month_mapping import MonthMappingResolver

BREAKFAST = uuid.uuid4()
LUNCH = uuid.uuid4()


def _record(source: EntrySource, product_id: uuid.UUID, day: date, quantity: int, serve: int | None = None) -> EntryRecord:
    return EntryRecord(source=source, product_id=product_id, entry_date=day, quantity=quantity, serve_item_no=serve)


def _by_date(record: EntryRecord) -> str:
    return record.entry_date.isoformat()


def test_quantity_coercion_treats_missing_as_zero_and_rejects_negative() -> None:
    assert _coerce_quantity(None) == 0
    assert _coerce_quantity(4) == 4
    with pytest.raises(ValueError):
        _coerce_quantity(-1)


def test_matrix_keeps_every_requested_bucket() -> None:
    buckets = ["2025-01", "2025-02", "2025-03"]
    matrix = ReportMatrix(buckets)

    matrix.accumulate([_record(EntrySource.STAFF, BREAKFAST, date(2025, 2, 3), 2)], lambda _r: "2025-02")

    assert matrix.bucket_keys() == buckets
    assert matrix.quantity("2025-01", BREAKFAST) == 0
    assert matrix.quantity("2025-02", BREAKFAST) == 2
    assert matrix.product_total(BREAKFAST) == 2


def test_program_and_staff_streams_merge_commutatively() -> None:
    program = [
        _record(EntrySource.PROGRAM, BREAKFAST, date(2025, 6, 1), 5),
        _record(EntrySource.PROGRAM, LUNCH, date(2025, 6, 1), 3),
        _record(EntrySource.PROGRAM, BREAKFAST, date(2025, 6, 2), 1),
    ]
    staff = [
        _record(EntrySource.STAFF, BREAKFAST, date(2025, 6, 1), 2),
        _record(EntrySource.STAFF, LUNCH, date(2025, 6, 3), 4),
    ]

    forward = ReportMatrix()
    forward.accumulate(program, _by_date)
    forward.accumulate(staff, _by_date)
    backward = ReportMatrix()
    backward.accumulate(staff, _by_date)
    backward.accumulate(program, _by_date)

    assert forward.as_dict() == backward.as_dict()
    assert forward.quantity("2025-06-01", BREAKFAST) == 7
    assert forward.bucket_total("2025-06-01", [BREAKFAST, LUNCH]) == 10


def test_accumulate_counts_records_and_keeps_last_serve_index() -> None:
    matrix = ReportMatrix()

    processed = matrix.accumulate(
        [
            _record(EntrySource.PROGRAM, BREAKFAST, date(2025, 6, 1), 1, serve=2),
            _record(EntrySource.PROGRAM, BREAKFAST, date(2025, 6, 2), 1, serve=5),
            _record(EntrySource.PROGRAM, LUNCH, date(2025, 6, 2), 0),
        ],
        _by_date,
    )

    assert processed == 3
    assert matrix.serve_item_nos == {BREAKFAST: 5}


@pytest.mark.parametrize("value", [None, "", "all", "ALL", " all "])
def test_package_selector_all_sentinel(value: str | None) -> None:
    assert parse_package_selector(value) is None


def test_package_selector_rejects_garbage() -> None:
    with pytest.raises(HTTPException) as exc_info:
        parse_package_selector("catering")

    assert exc_info.value.status_code == 400


def test_all_packages_resolves_configured_types(db_session, seed) -> None:
    seed.package("Catering", PackageType.NORMAL)
    seed.package("Extras", PackageType.EXTRA)
    seed.package("Drinks", PackageType.COLD_DRINK)

    aggregator = EntryAggregator(BillingRepository(db_session), ["Normal", "Cold Drink"])

    assert sorted(package.name for package in aggregator.resolve_packages("all")) == ["Catering", "Drinks"]


def test_unknown_package_is_not_found(db_session) -> None:
    aggregator = EntryAggregator(BillingRepository(db_session), ["Normal"])

    with pytest.raises(HTTPException) as exc_info:
        aggregator.resolve_packages(str(uuid.uuid4()))

    assert exc_info.value.status_code == 404


def test_null_quantities_read_as_zero(db_session, seed) -> None:
    package = seed.package()
    breakfast = seed.product(package, "Breakfast", serve_item_no=1)
    program = seed.program("Retreat", date(2025, 6, 1), date(2025, 6, 3), months=["2025-06"])
    seed.entry(program, breakfast, date(2025, 6, 1), None)
    seed.entry(program, breakfast, date(2025, 6, 2), 3)

    aggregator = EntryAggregator(BillingRepository(db_session), ["Normal"])
    records = aggregator.program_records(package_ids=[package.id], program_ids=[program.id])

    assert [record.quantity for record in records] == [0, 3]
    assert all(record.serve_item_no == 1 for record in records)


def test_month_mapping_ignores_program_calendar_dates(db_session, seed) -> None:
    program = seed.program("Straddling", date(2025, 5, 29), date(2025, 6, 2), months=["2025-06"])
    resolver = MonthMappingResolver(BillingRepository(db_session))

    assert resolver.resolve_month("2025-05") == set()
    assert resolver.resolve_month("2025-06") == {program.id}
    assert resolver.resolve_range(["2025-05", "2025-06"]) == {"2025-05": set(), "2025-06": {program.id}}
