"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from loft_reservations.dependencies import get_db_engine, get_reservation_service
from loft_reservations.services.reservations import ReservationService


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine returns the engine instance."""
    engine_gen = get_db_engine()
    engine = next(engine_gen)

    assert engine is not None
    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_dependency_injection_provides_same_engine() -> None:
    """Test that multiple calls get the same engine instance."""
    engine1 = next(get_db_engine())
    engine2 = next(get_db_engine())

    assert engine1 is engine2


@pytest.mark.unit
def test_reservation_service_uses_injected_engine() -> None:
    """Test that an overridden engine flows into the per-request service."""
    app = FastAPI()

    @app.get("/test")
    def test_endpoint(
        service: ReservationService = Depends(get_reservation_service),
    ) -> dict[str, str]:
        """Test endpoint."""
        return {"engine_name": service._engine.name}

    mock_engine = Mock(spec=Engine)
    mock_engine.name = "mock_engine"
    app.dependency_overrides[get_db_engine] = lambda: mock_engine

    client = TestClient(app)
    response = client.get("/test")

    assert response.status_code == 200
    assert response.json() == {"engine_name": "mock_engine"}


@pytest.mark.unit
def test_each_request_gets_its_own_service() -> None:
    """Test that services are not shared between calls."""
    engine = next(get_db_engine())

    assert get_reservation_service(engine) is not get_reservation_service(engine)
