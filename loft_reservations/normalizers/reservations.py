import json
from datetime import date, datetime
from typing import Any, Mapping

import structlog

from loft_reservations.config import DEBUG

logger = structlog.get_logger(__name__)

# Columns holding structured data. Depending on the driver and how the row was
# written they come back either decoded or as JSON text.
JSON_COLUMNS = ("guest_info", "pricing", "communication_preferences")

RECORD_FIELDS = (
    "id",
    "loft_id",
    "customer_id",
    "check_in_date",
    "check_out_date",
    "nights",
    "guest_info",
    "pricing",
    "special_requests",
    "dietary_requirements",
    "accessibility_needs",
    "status",
    "payment_status",
    "confirmation_code",
    "booking_reference",
    "communication_preferences",
    "terms_accepted",
    "terms_accepted_at",
    "terms_version",
    "booking_source",
    "user_agent",
    "ip_address",
    "cancellation_reason",
    "cancelled_by",
    "cancelled_at",
    "created_at",
    "updated_at",
    "created_by",
    "updated_by",
)


def decode_json_field(value: Any) -> Any:
    """
    Return structured data for a JSON column value.

    Args:
        value: Decoded structure, JSON text, or None

    Returns:
        The decoded structure (dict/list), or None

    Raises:
        json.JSONDecodeError: If a text value is not valid JSON
    """
    if isinstance(value, (str, bytes, bytearray)):
        return json.loads(value)
    return value


def _iso(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def normalize_reservation_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert a stored reservation row into the record shape returned to callers.

    JSON columns are decoded, dates and timestamps are rendered as ISO-8601
    strings, and columns missing from the row come back as None.

    Args:
        row: Row mapping from the reservations table

    Returns:
        dict: Reservation record
    """
    record: dict[str, Any] = {}

    for field in RECORD_FIELDS:
        value = row.get(field)
        if field in JSON_COLUMNS:
            record[field] = decode_json_field(value)
        else:
            record[field] = _iso(value)

    if DEBUG:
        logger.debug("Normalized reservation:\n%s", json.dumps(record, default=str, indent=2))

    return record
