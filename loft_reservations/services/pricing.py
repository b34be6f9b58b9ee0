"""
Reservation price quotes.

Pricing is a pure function of the loft's rate data and the stay dates. It is
recomputed on every validation and never cached, so the quote a guest sees is
always the quote that gets persisted.

Formula:
    base_price   = nights * price_per_night
    service_fee  = round(base_price * 12%)
    taxes        = round((base_price + service_fee) * tax_rate%)
    total_amount = base_price + cleaning_fee + service_fee + taxes

Taxes never apply to the cleaning fee. Rounding is half-up to the nearest
currency unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from loft_reservations.config import DEFAULT_TAX_RATE, RESERVATION_CURRENCY, SERVICE_FEE_RATE
from loft_reservations.schemas.lofts import LoftSnapshot
from loft_reservations.utils.datetime import parse_datetime

ONE_DAY = timedelta(days=1)
CURRENCY_UNIT = Decimal("1")


@dataclass(frozen=True)
class NightlyRate:
    date: str
    rate: Decimal
    type: str = "nightly_rate"


@dataclass(frozen=True)
class PricingBreakdown:
    nights: int
    nightly_rate: Decimal
    base_price: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    service_fee_rate: Decimal
    taxes: Decimal
    tax_rate: Decimal
    total_amount: Decimal
    currency: str
    breakdown: tuple[NightlyRate, ...]

    def to_dict(self) -> dict[str, Any]:
        """Render the quote with JSON-friendly numbers (integral amounts as ints)."""
        return {
            "nights": self.nights,
            "nightly_rate": json_number(self.nightly_rate),
            "base_price": json_number(self.base_price),
            "cleaning_fee": json_number(self.cleaning_fee),
            "service_fee": json_number(self.service_fee),
            "service_fee_rate": json_number(self.service_fee_rate),
            "taxes": json_number(self.taxes),
            "tax_rate": json_number(self.tax_rate),
            "total_amount": json_number(self.total_amount),
            "currency": self.currency,
            "breakdown": [
                {"date": night.date, "rate": json_number(night.rate), "type": night.type}
                for night in self.breakdown
            ],
        }


def json_number(value: Decimal) -> int | float:
    """Convert a Decimal to int when it has no fractional part, float otherwise."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def round_currency(value: Decimal) -> Decimal:
    """Round half-up to the nearest whole currency unit."""
    return value.quantize(CURRENCY_UNIT, rounding=ROUND_HALF_UP)


def count_nights(check_in: datetime, check_out: datetime) -> int:
    """
    Number of nights between two instants, rounding any partial day up.

    A stay of exactly 24 hours is one night; 25 hours is two.
    """
    days, remainder = divmod(check_out - check_in, ONE_DAY)
    return days + (1 if remainder else 0)


def calculate_pricing(
    loft: LoftSnapshot, check_in: Any, check_out: Any
) -> Optional[PricingBreakdown]:
    """
    Build the itemized price quote for a stay.

    Args:
        loft: Rate source (nightly price, cleaning fee, tax rate)
        check_in: Check-in date, datetime or ISO string
        check_out: Check-out date, datetime or ISO string

    Returns:
        PricingBreakdown, or None when the range does not cover at least one night
    """
    start = parse_datetime(check_in)
    end = parse_datetime(check_out)
    nights = count_nights(start, end)

    if nights <= 0:
        return None

    nightly_rate = Decimal(loft.price_per_night)
    base_price = nightly_rate * nights
    cleaning_fee = Decimal(loft.cleaning_fee or 0)
    service_fee = round_currency(base_price * SERVICE_FEE_RATE)
    tax_rate = Decimal(loft.tax_rate or DEFAULT_TAX_RATE)
    taxes = round_currency((base_price + service_fee) * tax_rate / 100)
    total_amount = base_price + cleaning_fee + service_fee + taxes

    # Flat rate for now; one entry per night leaves room for per-day overrides
    breakdown = tuple(
        NightlyRate(date=(start.date() + ONE_DAY * i).isoformat(), rate=nightly_rate)
        for i in range(nights)
    )

    return PricingBreakdown(
        nights=nights,
        nightly_rate=nightly_rate,
        base_price=base_price,
        cleaning_fee=cleaning_fee,
        service_fee=service_fee,
        service_fee_rate=SERVICE_FEE_RATE,
        taxes=taxes,
        tax_rate=tax_rate,
        total_amount=total_amount,
        currency=RESERVATION_CURRENCY,
        breakdown=breakdown,
    )
