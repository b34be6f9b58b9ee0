"""
Typed storage failures for reservation writes.

PostgreSQL reports constraint violations through SQLSTATE codes on the DBAPI
exception. Writers translate them into ViolationCode so the service layer can
pick a guest-facing message without knowing about drivers.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy.exc import IntegrityError


class ViolationCode(str, Enum):
    FOREIGN_KEY = "foreign_key"  # 23503: loft vanished between validation and insert
    UNIQUE = "unique"  # 23505: duplicate id / confirmation code / booking reference
    EXCLUSION = "exclusion"  # 23P01: overlapping active reservation for the loft
    UNKNOWN = "unknown"


SQLSTATE_TO_VIOLATION = {
    "23503": ViolationCode.FOREIGN_KEY,
    "23505": ViolationCode.UNIQUE,
    "23P01": ViolationCode.EXCLUSION,
}


class ReservationStorageError(Exception):
    """Raised by reservation writers when the database rejects a write."""

    def __init__(self, code: ViolationCode, detail: str = "") -> None:
        super().__init__(detail or code.value)
        self.code = code
        self.detail = detail


def sqlstate_of(error: IntegrityError) -> Optional[str]:
    """Extract the SQLSTATE from psycopg2 (pgcode) or psycopg 3 (sqlstate) errors."""
    orig = error.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def classify_integrity_error(error: IntegrityError) -> ReservationStorageError:
    code = SQLSTATE_TO_VIOLATION.get(sqlstate_of(error) or "", ViolationCode.UNKNOWN)
    return ReservationStorageError(code, str(error.orig))
