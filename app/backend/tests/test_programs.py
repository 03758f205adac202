from __future__ import annotations

from datetime import date, datetime, time

from fastapi.testclient import TestClient

from hospitality_billing.models.entities import PackageType


def test_list_programs_filters_by_billing_month_and_derives_status(client: TestClient, seed) -> None:
    past = seed.program("Old Retreat", date(2001, 1, 1), date(2001, 1, 3), months=["2001-01"])
    seed.program("Future Retreat", date(2999, 1, 1), date(2999, 1, 3), months=["2999-01"])

    everything = client.get("/api/v1/programs")
    january = client.get("/api/v1/programs", params={"billing_month": "2001-01"})

    assert everything.status_code == 200
    assert {row["name"]: row["status"] for row in everything.json()} == {
        "Old Retreat": "Completed",
        "Future Retreat": "Upcoming",
    }
    assert january.json() == [
        {
            "id": str(past.id),
            "name": "Old Retreat",
            "customer_name": "",
            "start_date": "2001-01-01",
            "end_date": "2001-01-03",
            "total_participants": 0,
            "status": "Completed",
            "billing_months": ["2001-01"],
        }
    ]


def test_list_programs_rejects_malformed_month(client: TestClient) -> None:
    response = client.get("/api/v1/programs", params={"billing_month": "2001-1"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid billing_month format. Expected format: YYYY-MM"}


def test_slot_quantities_count_participants_checked_in_that_day(client: TestClient, seed) -> None:
    package = seed.package("Catering", PackageType.NORMAL)
    breakfast = seed.product(package, "Breakfast", serve_item_no=1, slot=(time(8, 0), time(9, 0)))
    lunch = seed.product(package, "LUNCH", serve_item_no=2, slot=(time(13, 0), time(14, 0)))
    welcome = seed.product(package, "Welcome Drink", serve_item_no=3)
    program = seed.program("July Camp", date(2025, 7, 1), date(2025, 7, 3))
    seed.participant(program, "Asha", datetime(2025, 7, 1, 7, 30), datetime(2025, 7, 3, 10, 0))
    seed.participant(program, "Ben", datetime(2025, 7, 1, 12, 0), datetime(2025, 7, 2, 11, 0))
    seed.participant(program, "Chen", datetime(2025, 6, 30, 18, 0), datetime(2025, 7, 3, 10, 0))
    seed.participant(program, "Dana", None, None)

    response = client.get(
        f"/api/v1/programs/{program.id}/slot-quantities",
        params={"package_id": str(package.id), "entry_date": "2025-07-01"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["participants"] == 4
    assert body["items"] == [
        {
            "product_id": str(breakfast.id),
            "name": "Breakfast",
            "slot_start": "08:00",
            "slot_end": "09:00",
            "quantity": 1,
        },
        {
            "product_id": str(lunch.id),
            "name": "LUNCH",
            "slot_start": "13:00",
            "slot_end": "14:00",
            "quantity": 2,
        },
        {
            "product_id": str(welcome.id),
            "name": "Welcome Drink",
            "slot_start": None,
            "slot_end": None,
            "quantity": None,
        },
    ]


def test_slot_quantities_require_existing_program_and_package(client: TestClient, seed) -> None:
    package = seed.package("Catering", PackageType.NORMAL)
    program = seed.program("July Camp", date(2025, 7, 1), date(2025, 7, 3))

    missing_program = client.get(
        "/api/v1/programs/00000000-0000-0000-0000-000000000003/slot-quantities",
        params={"package_id": str(package.id), "entry_date": "2025-07-01"},
    )
    missing_package = client.get(
        f"/api/v1/programs/{program.id}/slot-quantities",
        params={"package_id": "00000000-0000-0000-0000-000000000004", "entry_date": "2025-07-01"},
    )
    bad_date = client.get(
        f"/api/v1/programs/{program.id}/slot-quantities",
        params={"package_id": str(package.id), "entry_date": "July first"},
    )

    assert missing_program.json() == {"error": "Program not found."}
    assert missing_package.json() == {"error": "Package not found."}
    assert bad_date.status_code == 400
