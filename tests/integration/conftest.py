"""
Shared fixtures for database integration tests.

Requires a PostgreSQL database migrated with ``alembic upgrade head``.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable, Generator

import pytest
from sqlalchemy import text

from loft_reservations.db.engine import engine

TEST_LOFT_ID = "it-loft-001"


@pytest.fixture
def test_loft() -> Generator[str, None, None]:
    """
    Create a bookable loft for reservation tests.

    Returns the loft_id. Deletes the loft and its reservations afterwards.
    """
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                INSERT INTO lofts.lofts
                    (id, name, price_per_night, cleaning_fee, tax_rate, max_guests,
                     minimum_stay, maximum_stay, status, is_published)
                VALUES (:id, 'Integration Loft', 150, 50, 19, 4, 1, 30, 'available', true)
                ON CONFLICT (id) DO NOTHING
                """
            ),
            {"id": TEST_LOFT_ID},
        )

    yield TEST_LOFT_ID

    # Cleanup: reservations first, the loft FK is RESTRICT
    with engine.begin() as conn:
        conn.execute(
            text("DELETE FROM lofts.reservations WHERE loft_id = :loft_id"),
            {"loft_id": TEST_LOFT_ID},
        )
        conn.execute(text("DELETE FROM lofts.lofts WHERE id = :id"), {"id": TEST_LOFT_ID})


@pytest.fixture
def make_row(test_loft: str) -> Callable[..., dict[str, Any]]:
    """Factory for complete reservation rows; keyword arguments override columns."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> dict[str, Any]:
        counter["n"] += 1
        n = counter["n"]
        now = datetime(2026, 1, 1, 9, 30, tzinfo=timezone.utc)
        row: dict[str, Any] = {
            "id": f"res_it_{n}",
            "customer_id": None,
            "loft_id": test_loft,
            "check_in_date": date(2026, 3, 10),
            "check_out_date": date(2026, 3, 14),
            "nights": 4,
            "guest_info": {"primary_guest": {"first_name": "Amina"}, "total_guests": 2},
            "pricing": {"nights": 4, "total_amount": 850, "currency": "DZD"},
            "special_requests": None,
            "dietary_requirements": None,
            "accessibility_needs": None,
            "status": "pending",
            "payment_status": "pending",
            "confirmation_code": f"ITCODE{n:02d}",
            "booking_reference": f"LA26{n:06d}",
            "communication_preferences": {"email": True, "sms": False, "whatsapp": False},
            "terms_accepted": True,
            "terms_accepted_at": now,
            "terms_version": "1.0",
            "booking_source": "website",
            "user_agent": None,
            "ip_address": None,
            "created_at": now,
            "updated_at": now,
            "created_by": None,
            "updated_by": None,
        }
        row.update(overrides)
        return row

    return _make
