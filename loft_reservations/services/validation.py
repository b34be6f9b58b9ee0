"""
Validation rules for reservation requests.

Every function here is a pure predicate over request data (and, for the
business rules, an already-resolved loft). None of them touch the database;
the reservation service decides the order they run in and when to stop.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional

from loft_reservations.config import MAX_ADVANCE_DAYS, MAX_GUESTS, MAX_STAY_NIGHTS
from loft_reservations.schemas.lofts import LoftSnapshot
from loft_reservations.services.pricing import count_nights
from loft_reservations.utils.datetime import parse_datetime

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)
SIMPLE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{3,50}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NON_DIGIT_RE = re.compile(r"\D")

SUSPICIOUS_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"<iframe", re.IGNORECASE),
)

MAX_NAME_LENGTH = 50
MAX_SPECIAL_REQUESTS_LENGTH = 1000
AGE_GROUPS = ("adult", "child", "infant")


@dataclass(frozen=True)
class DateRangeResult:
    valid: bool
    error: Optional[str] = None
    nights: Optional[int] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None


def validate_loft_id(loft_id: Any) -> bool:
    """Loft IDs are UUIDs, or short slug-style IDs for seeded data."""
    if not loft_id or not isinstance(loft_id, str):
        return False
    return bool(UUID_RE.match(loft_id) or SIMPLE_ID_RE.match(loft_id))


def validate_date_range(check_in: Any, check_out: Any, now: datetime) -> DateRangeResult:
    """
    Validate the requested stay window and fix its calendar dates.

    The check-in date is the calendar day of check-in in its own offset. The
    check-out date is check-in plus the night count, with partial days rounded
    up, so ``nights == (check_out - check_in).days`` always holds and the
    dates blocked are exactly the nights charged.

    Args:
        check_in: Raw check-in value (ISO string, date or datetime)
        check_out: Raw check-out value
        now: Current time, used for the "not in the past" and advance window rules

    Returns:
        DateRangeResult with the night count and stay dates when valid
    """
    if not check_in or not check_out:
        return DateRangeResult(False, "Both check-in and check-out dates are required")

    try:
        start = parse_datetime(check_in)
        end = parse_datetime(check_out)
    except (ValueError, OverflowError):
        return DateRangeResult(False, "Invalid date format. Please use YYYY-MM-DD format")

    check_in_date = start.date()
    if check_in_date < now.date():
        return DateRangeResult(False, "Check-in date cannot be in the past")

    if end <= start:
        return DateRangeResult(False, "Check-out date must be after check-in date")

    nights = count_nights(start, end)
    if nights < 1:
        return DateRangeResult(False, "Minimum stay is 1 night")

    if nights > MAX_STAY_NIGHTS:
        return DateRangeResult(False, f"Maximum stay is {MAX_STAY_NIGHTS} nights")

    if check_in_date > (now + timedelta(days=MAX_ADVANCE_DAYS)).date():
        return DateRangeResult(False, "Bookings can only be made up to 1 year in advance")

    return DateRangeResult(
        True,
        nights=nights,
        check_in=check_in_date,
        check_out=check_in_date + timedelta(days=nights),
    )


def validate_email(email: Any) -> bool:
    if not email or not isinstance(email, str):
        return False
    return bool(EMAIL_RE.match(email)) and len(email) <= 254


def validate_phone(phone: Any) -> bool:
    """Accept any formatting as long as 7-15 digits remain."""
    if not phone or not isinstance(phone, str):
        return False
    digits = NON_DIGIT_RE.sub("", phone)
    return 7 <= len(digits) <= 15


def _is_count(value: Any, minimum: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


def _short_name(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) >= 2


def _too_long(value: Any) -> bool:
    return isinstance(value, str) and len(value) > MAX_NAME_LENGTH


def validate_guest_info(guest_info: Any) -> list[str]:
    """
    Check the structured guest block of a reservation request.

    Args:
        guest_info: Mapping with primary_guest, counts and optional additional_guests

    Returns:
        list[str]: Every problem found, empty when the block is valid
    """
    if not guest_info or not isinstance(guest_info, dict):
        return ["Guest information is required"]

    errors: list[str] = []

    primary = guest_info.get("primary_guest")
    if not primary or not isinstance(primary, dict):
        errors.append("Primary guest information is required")
    else:
        if not _short_name(primary.get("first_name")):
            errors.append("Primary guest first name is required (minimum 2 characters)")
        if not _short_name(primary.get("last_name")):
            errors.append("Primary guest last name is required (minimum 2 characters)")
        if not validate_email(primary.get("email")):
            errors.append("Valid primary guest email is required")
        if not validate_phone(primary.get("phone")):
            errors.append("Valid primary guest phone number is required")
        if _too_long(primary.get("first_name")):
            errors.append("Primary guest first name cannot exceed 50 characters")
        if _too_long(primary.get("last_name")):
            errors.append("Primary guest last name cannot exceed 50 characters")
        if _too_long(primary.get("nationality")):
            errors.append("Nationality cannot exceed 50 characters")

    total = guest_info.get("total_guests")
    adults = guest_info.get("adults")
    children = guest_info.get("children")
    infants = guest_info.get("infants")

    if not _is_count(total, 1):
        errors.append("Total guests must be at least 1")
    if not _is_count(adults, 1):
        errors.append("At least 1 adult is required")
    if not _is_count(children, 0):
        errors.append("Children count cannot be negative")
    if not _is_count(infants, 0):
        errors.append("Infants count cannot be negative")

    if all(_is_count(v, 0) for v in (total, adults, children, infants)):
        if adults + children + infants != total:
            errors.append("Total guests must equal the sum of adults, children, and infants")

    additional = guest_info.get("additional_guests")
    if additional:
        if not isinstance(additional, list):
            errors.append("Additional guests must be an array")
        else:
            for index, guest in enumerate(additional, start=1):
                guest = guest if isinstance(guest, dict) else {}
                if not _short_name(guest.get("first_name")):
                    errors.append(
                        f"Additional guest {index}: First name is required (minimum 2 characters)"
                    )
                if not _short_name(guest.get("last_name")):
                    errors.append(
                        f"Additional guest {index}: Last name is required (minimum 2 characters)"
                    )
                if guest.get("age_group") not in AGE_GROUPS:
                    errors.append(
                        f"Additional guest {index}: Valid age group is required "
                        "(adult, child, or infant)"
                    )
                if _too_long(guest.get("first_name")):
                    errors.append(
                        f"Additional guest {index}: First name cannot exceed 50 characters"
                    )
                if _too_long(guest.get("last_name")):
                    errors.append(
                        f"Additional guest {index}: Last name cannot exceed 50 characters"
                    )

    return errors


def validate_special_requests(special_requests: Any) -> bool:
    """Free text is optional but must be short and free of markup/script injection."""
    if not special_requests:
        return True
    if not isinstance(special_requests, str):
        return False
    if len(special_requests) > MAX_SPECIAL_REQUESTS_LENGTH:
        return False
    return not any(pattern.search(special_requests) for pattern in SUSPICIOUS_PATTERNS)


def validate_loft_consistency(loft_id: str, loft: Optional[LoftSnapshot]) -> Optional[str]:
    """
    Check that a resolved loft can take bookings.

    Returns:
        Optional[str]: Error message, or None when the loft is bookable
    """
    if loft is None:
        return f"Loft with ID {loft_id} does not exist"
    if not loft.is_published:
        return "This loft is not available for booking"
    if loft.status != "available":
        return f"This loft is currently {loft.status} and not available for booking"
    return None


def validate_guest_count(guests: Any, max_guests: int) -> bool:
    if not _is_count(guests, 1) or not max_guests:
        return False
    return guests <= max_guests and guests <= MAX_GUESTS


def validate_business_rules(request: dict[str, Any], loft: LoftSnapshot, nights: int) -> list[str]:
    """
    Loft-specific rules: capacity and stay length.

    Args:
        request: Raw reservation request
        loft: Resolved, bookable loft
        nights: Night count from the date range check

    Returns:
        list[str]: Rule violations, empty when the stay fits the loft
    """
    errors: list[str] = []

    guest_info = request.get("guest_info") or {}
    if not validate_guest_count(guest_info.get("total_guests"), loft.max_guests):
        errors.append(f"This loft accommodates a maximum of {loft.max_guests} guests")

    if nights < loft.minimum_stay:
        errors.append(f"This loft requires a minimum stay of {loft.minimum_stay} night(s)")

    if loft.maximum_stay and nights > loft.maximum_stay:
        errors.append(f"This loft allows a maximum stay of {loft.maximum_stay} night(s)")

    return errors
