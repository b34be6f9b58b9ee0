from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy import insert, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from loft_reservations.db.errors import classify_integrity_error
from loft_reservations.metrics import db_query_duration
from loft_reservations.models.reservations import (
    Reservation,
    ReservationStatus,
    allowed_sources,
)

logger = structlog.get_logger(__name__)


def insert_reservation(engine: Engine, row: dict[str, Any]) -> dict[str, Any]:
    """
    Insert a single reservation and return the stored row.

    The overlap exclusion constraint makes this an atomic "insert if the dates
    are still free": two concurrent bookings for the same nights cannot both
    commit.

    Args:
        engine: SQLAlchemy Engine
        row: Column values for the new reservation

    Returns:
        dict: The inserted row as returned by the database

    Raises:
        ReservationStorageError: If a constraint rejects the row
    """
    stmt = insert(Reservation).values(row).returning(*Reservation.__table__.c)

    try:
        with db_query_duration.labels(operation="insert").time():
            with engine.begin() as conn:
                inserted = conn.execute(stmt).mappings().one()
    except IntegrityError as e:
        error = classify_integrity_error(e)
        logger.warning(
            "reservation_insert_rejected",
            reservation_id=row.get("id"),
            loft_id=row.get("loft_id"),
            violation=error.code.value,
            detail=error.detail,
        )
        raise error from e

    return dict(inserted)


def update_reservation_status(
    engine: Engine,
    reservation_id: str,
    status: ReservationStatus,
    updated_by: Optional[str],
    now: datetime,
) -> bool:
    """
    Move a reservation to a new status if the transition is legal.

    The legality check is part of the UPDATE's WHERE clause, so a concurrent
    change between read and write cannot slip an illegal transition through.

    Returns:
        bool: True if a row was updated, False if missing or not allowed
    """
    sources = [s.value for s in allowed_sources(status)]
    if not sources:
        return False

    stmt = (
        update(Reservation)
        .where(Reservation.id == reservation_id, Reservation.status.in_(sources))
        .values(status=status.value, updated_at=now, updated_by=updated_by)
    )

    with db_query_duration.labels(operation="update_status").time():
        with engine.begin() as conn:
            result = conn.execute(stmt)

    return result.rowcount > 0


def cancel_reservation(
    engine: Engine,
    reservation_id: str,
    reason: Optional[str],
    cancelled_by: Optional[str],
    now: datetime,
) -> bool:
    """
    Cancel a pending or confirmed reservation, stamping reason, actor and time.

    Returns:
        bool: True if a row was cancelled
    """
    sources = [s.value for s in allowed_sources(ReservationStatus.CANCELLED)]

    stmt = (
        update(Reservation)
        .where(Reservation.id == reservation_id, Reservation.status.in_(sources))
        .values(
            status=ReservationStatus.CANCELLED.value,
            cancellation_reason=reason,
            cancelled_by=cancelled_by,
            cancelled_at=now,
            updated_at=now,
            updated_by=cancelled_by,
        )
    )

    with db_query_duration.labels(operation="cancel").time():
        with engine.begin() as conn:
            result = conn.execute(stmt)

    return result.rowcount > 0
