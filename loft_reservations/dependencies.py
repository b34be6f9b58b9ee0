"""
FastAPI dependency injection providers.

Routes receive the engine and a per-request ReservationService through these
providers. Tests swap either one with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends
from sqlalchemy.engine import Engine

from loft_reservations.db.engine import engine
from loft_reservations.services.reservations import ReservationService


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide the shared database engine.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> mock_engine = Mock(spec=Engine)
        >>> app.dependency_overrides[get_db_engine] = lambda: mock_engine
    """
    yield engine


def get_reservation_service(
    db_engine: Engine = Depends(get_db_engine),
) -> ReservationService:
    """
    Build a ReservationService for the current request.

    The service holds no mutable state, so one instance per request is cheap
    and keeps requests isolated from each other.
    """
    return ReservationService(db_engine)
