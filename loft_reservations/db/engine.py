"""
SQLAlchemy engine singleton with connection pooling.

A single engine instance is shared by every request. Reservation calls are
short-lived (one lookup, one overlap query, one insert) so a modest pool with
pre-ping is enough to absorb bursts of concurrent bookings.
"""

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine

from loft_reservations.config import DATABASE_URL, SCHEMA

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")

engine: Engine = create_engine(
    DATABASE_URL,
    future=True,
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,  # Detect connections dropped by the server
    pool_recycle=3600,
    echo=False,
)

REQUIRED_TABLES = ("lofts", "reservations")


def check_engine_health(db_engine: Engine = engine) -> bool:
    """
    Check if the database is reachable.

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        with db_engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def check_schema_ready(db_engine: Engine = engine) -> bool:
    """
    Check that migrations have created the tables this service reads and writes.

    Returns:
        bool: True if every required table exists in the service schema
    """
    try:
        inspector = inspect(db_engine)
        return all(inspector.has_table(table, schema=SCHEMA) for table in REQUIRED_TABLES)
    except Exception:
        return False
