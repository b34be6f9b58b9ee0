"""
Unit tests for reservation price quotes.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from loft_reservations.schemas.lofts import LoftSnapshot
from loft_reservations.services.pricing import (
    calculate_pricing,
    count_nights,
    json_number,
    round_currency,
)


@pytest.mark.unit
def test_four_nights_without_cleaning_fee(loft: LoftSnapshot) -> None:
    """Test the reference quote: 4 nights at 150 with 19% tax."""
    pricing = calculate_pricing(loft, "2026-03-10", "2026-03-14")

    assert pricing is not None
    assert pricing.nights == 4
    assert pricing.base_price == Decimal("600")
    assert pricing.cleaning_fee == Decimal("0")
    assert pricing.service_fee == Decimal("72")
    assert pricing.taxes == Decimal("128")
    assert pricing.total_amount == Decimal("800")
    assert pricing.currency == "DZD"


@pytest.mark.unit
def test_cleaning_fee_is_added_but_not_taxed(loft: LoftSnapshot) -> None:
    """Test that the cleaning fee is passed through outside the tax base."""
    with_fee = loft.model_copy(update={"cleaning_fee": Decimal("50")})

    pricing = calculate_pricing(with_fee, "2026-03-10", "2026-03-14")

    assert pricing is not None
    assert pricing.taxes == Decimal("128")
    assert pricing.total_amount == Decimal("850")


@pytest.mark.unit
def test_default_tax_rate_applies_when_loft_has_none(loft: LoftSnapshot) -> None:
    """Test that a loft without a tax rate is taxed at 19%."""
    untaxed = loft.model_copy(update={"tax_rate": None})

    pricing = calculate_pricing(untaxed, "2026-03-10", "2026-03-14")

    assert pricing is not None
    assert pricing.tax_rate == Decimal("19")
    assert pricing.taxes == Decimal("128")


@pytest.mark.unit
def test_service_fee_rounds_half_up(loft: LoftSnapshot) -> None:
    """Test that 12% of 187.50 (22.50) rounds to 23 rather than to even."""
    cheap = loft.model_copy(update={"price_per_night": Decimal("187.50")})

    pricing = calculate_pricing(cheap, "2026-03-10", "2026-03-11")

    assert pricing is not None
    assert pricing.service_fee == Decimal("23")
    assert round_currency(Decimal("0.5")) == Decimal("1")
    assert round_currency(Decimal("2.5")) == Decimal("3")


@pytest.mark.unit
def test_breakdown_has_one_entry_per_night(loft: LoftSnapshot) -> None:
    """Test that the nightly ledger walks forward one day at a time."""
    pricing = calculate_pricing(loft, "2026-03-30", "2026-04-02")

    assert pricing is not None
    assert [night.date for night in pricing.breakdown] == [
        "2026-03-30",
        "2026-03-31",
        "2026-04-01",
    ]
    assert all(night.rate == Decimal("150.00") for night in pricing.breakdown)
    assert all(night.type == "nightly_rate" for night in pricing.breakdown)


@pytest.mark.unit
def test_breakdown_starts_on_local_check_in_day(loft: LoftSnapshot) -> None:
    """Test that an offset check-in is listed under its own calendar day."""
    pricing = calculate_pricing(loft, "2026-03-10T00:00+01:00", "2026-03-14T00:00+01:00")

    assert pricing is not None
    assert pricing.nights == 4
    assert [night.date for night in pricing.breakdown] == [
        "2026-03-10",
        "2026-03-11",
        "2026-03-12",
        "2026-03-13",
    ]


@pytest.mark.unit
def test_non_positive_range_returns_none(loft: LoftSnapshot) -> None:
    """Test that pricing refuses ranges that do not cover a night."""
    assert calculate_pricing(loft, "2026-03-10", "2026-03-10") is None
    assert calculate_pricing(loft, "2026-03-12", "2026-03-10") is None


@pytest.mark.unit
def test_pricing_is_deterministic(loft: LoftSnapshot) -> None:
    """Test that identical inputs give identical quotes."""
    first = calculate_pricing(loft, "2026-03-10", "2026-03-14")
    second = calculate_pricing(loft, date(2026, 3, 10), date(2026, 3, 14))

    assert first == second
    assert first is not None and second is not None
    assert first.to_dict() == second.to_dict()


@pytest.mark.unit
def test_to_dict_renders_json_numbers(loft: LoftSnapshot) -> None:
    """Test that whole amounts serialize as ints and fractional ones as floats."""
    pricing = calculate_pricing(loft, "2026-03-10", "2026-03-12")
    assert pricing is not None

    data = pricing.to_dict()

    assert data["base_price"] == 300
    assert isinstance(data["base_price"], int)
    assert data["service_fee_rate"] == 0.12
    assert data["breakdown"][0] == {"date": "2026-03-10", "rate": 150, "type": "nightly_rate"}
    assert json_number(Decimal("12.50")) == 12.5


@pytest.mark.unit
@pytest.mark.parametrize(
    ("check_out", "expected"),
    [
        (datetime(2026, 3, 11, 0, 0, tzinfo=timezone.utc), 1),
        (datetime(2026, 3, 11, 1, 0, tzinfo=timezone.utc), 2),
        (datetime(2026, 3, 12, 0, 0, tzinfo=timezone.utc), 2),
    ],
)
def test_count_nights_rounds_partial_days_up(check_out: datetime, expected: int) -> None:
    """Test that exactly 24h is one night and any extra hour adds a night."""
    check_in = datetime(2026, 3, 10, 0, 0, tzinfo=timezone.utc)

    assert count_nights(check_in, check_out) == expected
