"""
Identifier generators for new reservations.

None of these guarantee uniqueness: the reservations table carries primary key
and unique constraints, and a collision surfaces as a unique violation on
insert.
"""

import secrets
import string
import time
from datetime import datetime

from loft_reservations.config import BOOKING_REFERENCE_PREFIX

BASE36_ALPHABET = string.digits + string.ascii_lowercase
CONFIRMATION_CODE_LENGTH = 8


def generate_reservation_id() -> str:
    """Internal ID: ``res_<epoch millis>_<9 base36 chars>``."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(9))
    return f"res_{millis}_{suffix}"


def generate_confirmation_code() -> str:
    """Guest-facing code, e.g. ``K7Q2ZP9A``."""
    return "".join(
        secrets.choice(BASE36_ALPHABET) for _ in range(CONFIRMATION_CODE_LENGTH)
    ).upper()


def generate_booking_reference(now: datetime) -> str:
    """Typeable reference: prefix + two-digit year + six digits, e.g. ``LA26004217``."""
    year = now.strftime("%y")
    number = secrets.randbelow(1_000_000)
    return f"{BOOKING_REFERENCE_PREFIX}{year}{number:06d}"
