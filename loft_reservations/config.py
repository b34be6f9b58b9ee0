import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

SCHEMA = "lofts"

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Pricing
RESERVATION_CURRENCY = os.getenv("RESERVATION_CURRENCY", "DZD").upper()
SERVICE_FEE_RATE = Decimal("0.12")
DEFAULT_TAX_RATE = Decimal(os.getenv("DEFAULT_TAX_RATE", "19"))

# Booking rules
DEFAULT_TERMS_VERSION = os.getenv("DEFAULT_TERMS_VERSION", "1.0")
DEFAULT_BOOKING_SOURCE = "website"
BOOKING_REFERENCE_PREFIX = os.getenv("BOOKING_REFERENCE_PREFIX", "LA")
MAX_STAY_NIGHTS = int(os.getenv("MAX_STAY_NIGHTS", "90"))
MAX_ADVANCE_DAYS = int(os.getenv("MAX_ADVANCE_DAYS", "365"))
MAX_GUESTS = int(os.getenv("MAX_GUESTS", "20"))

# Observability
SLOW_REQUEST_THRESHOLD_MS = int(os.getenv("SLOW_REQUEST_THRESHOLD_MS", "500"))
