# loft_reservations/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from loft_reservations.config import ALLOWED_ORIGINS
from loft_reservations.logging_config import setup_logging
from loft_reservations.middleware import RequestIDMiddleware
from loft_reservations.routes.health import router as health_router
from loft_reservations.routes.metrics import router as metrics_router
from loft_reservations.routes.reservations import router as reservations_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Loft Reservations API",
    description="Validate, price and book loft stays",
    version="1.0.0",
)

app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(reservations_router, tags=["Reservations"])

logger.info("application_configured", routes=len(app.routes))
