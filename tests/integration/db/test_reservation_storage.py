"""
Integration tests for reservation readers and writers against PostgreSQL.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable

import pytest
from sqlalchemy import text

from loft_reservations.db.engine import check_engine_health, check_schema_ready, engine
from loft_reservations.db.errors import ReservationStorageError, ViolationCode
from loft_reservations.db.readers.lofts import get_loft
from loft_reservations.db.readers.reservations import (
    get_reservation_by_identifier,
    has_conflicting_reservation,
)
from loft_reservations.db.writers.reservations import (
    cancel_reservation,
    insert_reservation,
    update_reservation_status,
)
from loft_reservations.models.reservations import ReservationStatus

NOW = datetime(2026, 1, 2, 12, 0, tzinfo=timezone.utc)


@pytest.mark.integration
def test_database_is_ready() -> None:
    """Test that the migrated schema is visible to the readiness checks."""
    assert check_engine_health(engine)
    assert check_schema_ready(engine)


@pytest.mark.integration
def test_get_loft(test_loft: str) -> None:
    """Test that loft rate columns are read back."""
    loft = get_loft(engine, test_loft)

    assert loft is not None
    assert loft["price_per_night"] == 150
    assert loft["is_published"] is True
    assert get_loft(engine, "it-loft-missing") is None


@pytest.mark.integration
def test_insert_and_lookup_by_each_identifier(make_row: Callable[..., dict[str, Any]]) -> None:
    """Test that a stored reservation is found by id, code and reference."""
    row = make_row()
    inserted = insert_reservation(engine, row)

    assert inserted["id"] == row["id"]
    for identifier in (row["id"], row["confirmation_code"], row["booking_reference"]):
        found = get_reservation_by_identifier(engine, identifier)
        assert found is not None
        assert found["id"] == row["id"]
        assert found["guest_info"] == row["guest_info"]
        assert found["pricing"] == row["pricing"]

    assert get_reservation_by_identifier(engine, "NOPE0000") is None


@pytest.mark.integration
def test_conflict_detection(make_row: Callable[..., dict[str, Any]], test_loft: str) -> None:
    """Test overlap rules: touching stays are fine, cancelled ones never block."""
    insert_reservation(engine, make_row())

    assert has_conflicting_reservation(engine, test_loft, date(2026, 3, 12), date(2026, 3, 16))
    assert has_conflicting_reservation(engine, test_loft, date(2026, 3, 8), date(2026, 3, 20))
    assert not has_conflicting_reservation(engine, test_loft, date(2026, 3, 14), date(2026, 3, 16))
    assert not has_conflicting_reservation(engine, test_loft, date(2026, 3, 6), date(2026, 3, 10))


@pytest.mark.integration
def test_cancelled_reservations_free_the_dates(
    make_row: Callable[..., dict[str, Any]], test_loft: str
) -> None:
    """Test that cancelling releases the nights for new bookings."""
    row = make_row()
    insert_reservation(engine, row)

    assert cancel_reservation(engine, row["id"], "Guest request", "user-42", NOW)
    assert not has_conflicting_reservation(
        engine, test_loft, date(2026, 3, 10), date(2026, 3, 14)
    )
    insert_reservation(engine, make_row())


@pytest.mark.integration
@pytest.mark.parametrize(
    ("overrides", "expected"),
    [
        (
            {"check_in_date": date(2026, 3, 12), "check_out_date": date(2026, 3, 15)},
            ViolationCode.EXCLUSION,
        ),
        (
            {
                "confirmation_code": "ITCODE01",
                "check_in_date": date(2026, 4, 1),
                "check_out_date": date(2026, 4, 3),
            },
            ViolationCode.UNIQUE,
        ),
        ({"loft_id": "it-loft-missing"}, ViolationCode.FOREIGN_KEY),
    ],
)
def test_insert_violations_are_classified(
    make_row: Callable[..., dict[str, Any]],
    overrides: dict[str, Any],
    expected: ViolationCode,
) -> None:
    """Test that constraint failures surface as typed storage errors."""
    insert_reservation(engine, make_row())

    with pytest.raises(ReservationStorageError) as exc_info:
        insert_reservation(engine, make_row(**overrides))

    assert exc_info.value.code is expected


@pytest.mark.integration
def test_status_transitions_follow_lifecycle(make_row: Callable[..., dict[str, Any]]) -> None:
    """Test legal and illegal status updates against stored rows."""
    row = make_row()
    insert_reservation(engine, row)

    assert update_reservation_status(engine, row["id"], ReservationStatus.CONFIRMED, "admin", NOW)
    assert not update_reservation_status(engine, row["id"], ReservationStatus.PENDING, "admin", NOW)
    assert update_reservation_status(engine, row["id"], ReservationStatus.COMPLETED, "admin", NOW)
    assert not update_reservation_status(
        engine, row["id"], ReservationStatus.CANCELLED, "admin", NOW
    )
    assert not update_reservation_status(
        engine, "res_missing", ReservationStatus.CONFIRMED, "admin", NOW
    )

    stored = get_reservation_by_identifier(engine, row["id"])
    assert stored is not None
    assert stored["status"] == "completed"
    assert stored["updated_by"] == "admin"


@pytest.mark.integration
def test_cancel_stamps_reason_and_actor(make_row: Callable[..., dict[str, Any]]) -> None:
    """Test cancellation details are recorded and cannot be applied twice."""
    row = make_row()
    insert_reservation(engine, row)

    assert cancel_reservation(engine, row["id"], "Flight cancelled", "user-42", NOW)
    assert not cancel_reservation(engine, row["id"], "Again", "user-42", NOW)

    with engine.connect() as conn:
        stored = (
            conn.execute(
                text(
                    "SELECT status, cancellation_reason, cancelled_by, cancelled_at "
                    "FROM lofts.reservations WHERE id = :id"
                ),
                {"id": row["id"]},
            )
            .mappings()
            .one()
        )

    assert stored["status"] == "cancelled"
    assert stored["cancellation_reason"] == "Flight cancelled"
    assert stored["cancelled_by"] == "user-42"
    assert stored["cancelled_at"] == NOW
