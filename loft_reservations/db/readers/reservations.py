from datetime import date
from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.engine import Engine

from loft_reservations.metrics import db_query_duration
from loft_reservations.models.reservations import ACTIVE_STATUSES, Reservation


def has_conflicting_reservation(
    engine: Engine, loft_id: str, check_in: date, check_out: date
) -> bool:
    """
    Check whether an active reservation overlaps the requested stay.

    Two stays overlap when ``existing.check_in < new.check_out`` and
    ``existing.check_out > new.check_in``; a checkout on the new check-in day
    is not a conflict.

    Args:
        engine (Engine): SQLAlchemy engine.
        loft_id (str): Loft identifier.
        check_in (date): Requested check-in date.
        check_out (date): Requested check-out date.

    Returns:
        bool: True if at least one pending/confirmed reservation overlaps.
    """
    stmt = (
        select(Reservation.id)
        .where(
            Reservation.loft_id == loft_id,
            Reservation.status.in_([s.value for s in ACTIVE_STATUSES]),
            Reservation.check_in_date < check_out,
            Reservation.check_out_date > check_in,
        )
        .limit(1)
    )

    with db_query_duration.labels(operation="conflict_check").time():
        with engine.connect() as conn:
            return conn.execute(stmt).first() is not None


def get_reservation_by_identifier(engine: Engine, identifier: str) -> Optional[dict[str, Any]]:
    """
    Look up a reservation by internal ID, confirmation code or booking reference.

    Args:
        engine (Engine): SQLAlchemy engine.
        identifier (str): Any of the three identifiers.

    Returns:
        Optional[dict[str, Any]]: Raw row mapping, or None if nothing matches.
    """
    stmt = (
        select(Reservation.__table__)
        .where(
            or_(
                Reservation.id == identifier,
                Reservation.confirmation_code == identifier,
                Reservation.booking_reference == identifier,
            )
        )
        .limit(1)
    )

    with db_query_duration.labels(operation="lookup").time():
        with engine.connect() as conn:
            row = conn.execute(stmt).mappings().fetchone()

    return dict(row) if row else None
