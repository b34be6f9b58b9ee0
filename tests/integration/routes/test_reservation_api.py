"""
End-to-end reservation tests: HTTP API, service and PostgreSQL together.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

from loft_reservations.db.engine import engine
from loft_reservations.dependencies import get_reservation_service
from loft_reservations.main import app
from loft_reservations.services.reservations import UNAVAILABLE_ERROR, ReservationService


@pytest.fixture
def service(fixed_now: datetime) -> ReservationService:
    """Service against the real database with a frozen clock."""
    return ReservationService(engine, clock=lambda: fixed_now)


@pytest.fixture
def client(service: ReservationService) -> Generator[TestClient, None, None]:
    """Test client wired to the frozen-clock service."""
    app.dependency_overrides[get_reservation_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def booking(reservation_request: dict[str, Any], test_loft: str) -> dict[str, Any]:
    """The shared request fixture pointed at the integration loft."""
    return {**reservation_request, "loft_id": test_loft}


@pytest.mark.integration
def test_quote_create_and_fetch(client: TestClient, booking: dict[str, Any]) -> None:
    """Test the full booking flow and that stored JSON reads back unchanged."""
    quote = client.post("/reservations/quote", json=booking)
    assert quote.status_code == 200
    assert quote.json()["valid"] is True
    assert quote.json()["pricing"]["total_amount"] == 850

    created = client.post("/reservations", json=booking, headers={"X-User-Id": "user-42"})
    assert created.status_code == 201
    body = created.json()

    fetched = client.get(f"/reservations/{body['confirmation_code']}")
    assert fetched.status_code == 200
    record = fetched.json()
    assert record["id"] == body["reservation"]["id"]
    assert record["booking_reference"] == body["booking_reference"]
    assert record["guest_info"] == booking["guest_info"]
    assert record["pricing"] == quote.json()["pricing"]
    assert record["customer_id"] == "user-42"
    assert record["status"] == "pending"


@pytest.mark.integration
def test_second_booking_for_same_nights_conflicts(
    client: TestClient, booking: dict[str, Any]
) -> None:
    """Test that a sequential double booking is rejected with 409."""
    assert client.post("/reservations", json=booking).status_code == 201

    response = client.post("/reservations", json=booking)

    assert response.status_code == 409
    assert response.json()["errors"] == [UNAVAILABLE_ERROR]


@pytest.mark.integration
def test_concurrent_bookings_only_one_succeeds(
    service: ReservationService, booking: dict[str, Any]
) -> None:
    """Test that racing requests for the same nights cannot both be stored."""
    with ThreadPoolExecutor(max_workers=5) as executor:
        results = list(executor.map(lambda _: service.create(booking), range(5)))

    successes = [result for result in results if result.success]
    failures = [result for result in results if not result.success]

    assert len(successes) == 1
    assert all(result.errors == [UNAVAILABLE_ERROR] for result in failures)


@pytest.mark.integration
def test_lifecycle_through_api(client: TestClient, booking: dict[str, Any]) -> None:
    """Test confirm, then cancel, then a rejected second cancel."""
    reservation_id = client.post("/reservations", json=booking).json()["reservation"]["id"]

    confirm = client.patch(f"/reservations/{reservation_id}/status", json={"status": "confirmed"})
    assert confirm.status_code == 200

    cancel = client.post(
        f"/reservations/{reservation_id}/cancel",
        json={"reason": "Change of plans", "cancelled_by": "user-42"},
    )
    assert cancel.status_code == 200

    again = client.post(f"/reservations/{reservation_id}/cancel", json={})
    assert again.status_code == 409

    record = client.get(f"/reservations/{reservation_id}").json()
    assert record["status"] == "cancelled"
    assert record["cancellation_reason"] == "Change of plans"
