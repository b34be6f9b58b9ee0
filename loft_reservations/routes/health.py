"""
Liveness and readiness probes.

/ready only reports ready once the database answers and the reservations
schema has been migrated, so a fresh deployment does not take bookings it
cannot store.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from loft_reservations.db.engine import check_engine_health, check_schema_ready
from loft_reservations.dependencies import get_db_engine

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """Liveness probe: the process is up."""
    return JSONResponse(content={"status": "ok"})


@router.get("/ready")
def readiness_check(db_engine: Engine = Depends(get_db_engine)) -> JSONResponse:
    """
    Readiness probe.

    Returns:
        200 {"status": "ready", "checks": {...}} when the database is reachable
        and migrated, 503 {"status": "not ready", "checks": {...}} otherwise

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"database": "ok", "schema": "ok"}}
    """
    checks = {"database": "failed", "schema": "skipped"}

    if check_engine_health(db_engine):
        checks["database"] = "ok"
        checks["schema"] = "ok" if check_schema_ready(db_engine) else "missing"

    if all(value == "ok" for value in checks.values()):
        return JSONResponse(content={"status": "ready", "checks": checks})

    logger.error("readiness_check_failed", checks=checks)
    return JSONResponse(status_code=503, content={"status": "not ready", "checks": checks})
