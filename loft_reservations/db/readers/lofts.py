from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine

from loft_reservations.metrics import db_query_duration
from loft_reservations.models.lofts import Loft


def get_loft(engine: Engine, loft_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch the rate and booking-rule columns of a loft.

    Args:
        engine (Engine): SQLAlchemy engine.
        loft_id (str): Loft identifier.

    Returns:
        Optional[dict[str, Any]]: Loft columns, or None if no such loft exists.
    """
    stmt = select(
        Loft.id,
        Loft.name,
        Loft.price_per_night,
        Loft.cleaning_fee,
        Loft.tax_rate,
        Loft.max_guests,
        Loft.minimum_stay,
        Loft.maximum_stay,
        Loft.status,
        Loft.is_published,
    ).where(Loft.id == loft_id)

    with db_query_duration.labels(operation="get_loft").time():
        with engine.connect() as conn:
            row = conn.execute(stmt).mappings().fetchone()

    return dict(row) if row else None
