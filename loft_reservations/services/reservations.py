"""
Reservation validation, pricing and persistence.

ReservationService is the only entry point the HTTP layer uses. It is built
per request around the shared engine and never raises: every public method
returns a result value (or None/False) and logs infrastructure failures.

Validation pipeline:
    1. Request present, otherwise stop.
    2. Field checks (loft ID, dates, guest info, guest count, special
       requests, terms) all run and accumulate errors.
    3. Any error so far: stop before touching the database.
    4. Resolve the loft; missing or unbookable: stop.
    5. Capacity and stay-length rules accumulate.
    6. Price the stay; if no quote can be produced: stop.
    7. Check for overlapping active reservations, failing closed.
    8. Valid only if no errors accumulated. Partial artifacts (loft,
       pricing, nights) are returned either way for price previews.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, cast

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from loft_reservations.config import (
    DEFAULT_BOOKING_SOURCE,
    DEFAULT_TERMS_VERSION,
)
from loft_reservations.db.errors import ReservationStorageError, ViolationCode
from loft_reservations.db.readers.lofts import get_loft
from loft_reservations.db.readers.reservations import (
    get_reservation_by_identifier,
    has_conflicting_reservation,
)
from loft_reservations.db.writers.reservations import (
    cancel_reservation,
    insert_reservation,
    update_reservation_status,
)
from loft_reservations.metrics import (
    availability_checks,
    reservation_create_failures,
    reservation_validations,
    reservations_created,
    status_transitions,
)
from loft_reservations.models.reservations import PaymentStatus, ReservationStatus
from loft_reservations.normalizers.reservations import normalize_reservation_row
from loft_reservations.schemas.lofts import LoftSnapshot
from loft_reservations.services.identifiers import (
    generate_booking_reference,
    generate_confirmation_code,
    generate_reservation_id,
)
from loft_reservations.services.pricing import PricingBreakdown, calculate_pricing, json_number
from loft_reservations.services.validation import (
    validate_business_rules,
    validate_date_range,
    validate_guest_info,
    validate_loft_consistency,
    validate_loft_id,
    validate_special_requests,
)
from loft_reservations.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

MISSING_REQUEST_ERROR = "Reservation data is required"
INVALID_LOFT_ID_ERROR = "Invalid loft ID format"
GUEST_COUNT_MISMATCH_ERROR = "Guest count must match guest information total"
UNSAFE_REQUESTS_ERROR = "Special requests contain invalid content"
TERMS_NOT_ACCEPTED_ERROR = "Terms and conditions must be accepted"
PRICING_ERROR = "Unable to calculate pricing for this reservation"
UNAVAILABLE_ERROR = "The selected dates are not available for this loft"
VALIDATION_FAILURE_ERROR = "Error validating reservation data. Please try again."
UNEXPECTED_ERROR = "An unexpected error occurred. Please try again."
GENERIC_INSERT_ERROR = "Unable to create reservation. Please try again."

INSERT_ERROR_MESSAGES = {
    ViolationCode.FOREIGN_KEY: (
        "The selected loft is no longer available. Please refresh and try again."
    ),
    ViolationCode.UNIQUE: (
        "A reservation with these details already exists. Please check your booking history."
    ),
    ViolationCode.EXCLUSION: UNAVAILABLE_ERROR,
}

DEFAULT_COMMUNICATION_PREFERENCES = {"email": True, "sms": False, "whatsapp": False}


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)
    loft: Optional[LoftSnapshot] = None
    pricing: Optional[PricingBreakdown] = None
    nights: Optional[int] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "loft": _loft_to_dict(self.loft) if self.loft else None,
            "pricing": self.pricing.to_dict() if self.pricing else None,
            "nights": self.nights,
            "check_in_date": self.check_in_date.isoformat() if self.check_in_date else None,
            "check_out_date": self.check_out_date.isoformat() if self.check_out_date else None,
        }


@dataclass
class CreationResult:
    success: bool
    errors: list[str] = field(default_factory=list)
    reservation: Optional[dict[str, Any]] = None
    confirmation_code: Optional[str] = None
    booking_reference: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "errors": list(self.errors),
            "reservation": self.reservation,
            "confirmation_code": self.confirmation_code,
            "booking_reference": self.booking_reference,
        }


def _loft_to_dict(loft: LoftSnapshot) -> dict[str, Any]:
    """Same number rendering as the pricing quote (integral amounts as ints)."""
    return {
        key: json_number(value) if isinstance(value, Decimal) else value
        for key, value in loft.model_dump().items()
    }


class ReservationService:
    """
    Validates, prices and stores loft reservations.

    Args:
        engine: SQLAlchemy engine used by the reader/writer functions
        clock: Source of "now" (UTC); injectable for tests
    """

    def __init__(self, engine: Engine, clock: Callable[[], datetime] = utc_now) -> None:
        self._engine = engine
        self._clock = clock

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, request: Optional[Mapping[str, Any]]) -> ValidationResult:
        """
        Run the validation pipeline and produce a price quote.

        Args:
            request: Raw reservation request

        Returns:
            ValidationResult: valid flag, accumulated errors, and any artifacts produced
        """
        try:
            result, outcome = self._validate(request)
        except Exception as e:
            logger.exception("reservation_validation_failed", error=str(e))
            reservation_validations.labels(outcome="error").inc()
            return ValidationResult(valid=False, errors=[VALIDATION_FAILURE_ERROR])

        reservation_validations.labels(outcome=outcome).inc()
        return result

    def _validate(self, request: Optional[Mapping[str, Any]]) -> tuple[ValidationResult, str]:
        if not request or not isinstance(request, Mapping):
            return ValidationResult(valid=False, errors=[MISSING_REQUEST_ERROR]), "invalid_input"

        errors: list[str] = []
        loft_id = request.get("loft_id")
        check_in = request.get("check_in_date")
        check_out = request.get("check_out_date")
        guest_info = request.get("guest_info")

        if not validate_loft_id(loft_id):
            errors.append(INVALID_LOFT_ID_ERROR)

        date_range = validate_date_range(check_in, check_out, self._clock())
        if not date_range.valid:
            errors.append(date_range.error or "Invalid date range")

        errors.extend(validate_guest_info(guest_info))

        total_guests = guest_info.get("total_guests") if isinstance(guest_info, Mapping) else None
        if request.get("guests") != total_guests:
            errors.append(GUEST_COUNT_MISMATCH_ERROR)

        if not validate_special_requests(request.get("special_requests")):
            errors.append(UNSAFE_REQUESTS_ERROR)

        if request.get("terms_accepted") is not True:
            errors.append(TERMS_NOT_ACCEPTED_ERROR)

        if errors:
            return ValidationResult(valid=False, errors=errors), "invalid_input"

        loft_row = get_loft(self._engine, loft_id)
        loft = LoftSnapshot.model_validate(loft_row) if loft_row else None

        loft_error = validate_loft_consistency(loft_id, loft)
        if loft_error:
            errors.append(loft_error)
            return ValidationResult(valid=False, errors=errors, loft=loft), "loft_rejected"

        # Stay dates are fixed once by the date range check; pricing, the
        # conflict query and the stored row all use them.
        stay_start = cast(date, date_range.check_in)
        stay_end = cast(date, date_range.check_out)
        nights = date_range.nights or 0
        errors.extend(validate_business_rules(dict(request), loft, nights))

        pricing = calculate_pricing(loft, stay_start, stay_end)
        if pricing is None:
            errors.append(PRICING_ERROR)
            return (
                ValidationResult(valid=False, errors=errors, loft=loft, nights=nights),
                "pricing_failed",
            )

        if not self._is_available(loft_id, stay_start, stay_end):
            errors.append(UNAVAILABLE_ERROR)

        result = ValidationResult(
            valid=not errors,
            errors=errors,
            loft=loft,
            pricing=pricing,
            nights=nights,
            check_in_date=stay_start,
            check_out_date=stay_end,
        )
        return result, "valid" if result.valid else "invalid"

    def _is_available(self, loft_id: str, check_in: date, check_out: date) -> bool:
        """Fail closed: a failed conflict query counts as unavailable."""
        try:
            conflict = has_conflicting_reservation(self._engine, loft_id, check_in, check_out)
        except Exception as e:
            logger.exception("availability_check_failed", loft_id=loft_id, error=str(e))
            availability_checks.labels(result="error").inc()
            return False

        availability_checks.labels(result="conflict" if conflict else "available").inc()
        return not conflict

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(
        self, request: Optional[Mapping[str, Any]], actor_id: Optional[str] = None
    ) -> CreationResult:
        """
        Validate and persist a reservation.

        Args:
            request: Raw reservation request
            actor_id: Customer/user creating the booking (stored as customer_id and created_by)

        Returns:
            CreationResult: the stored record and guest-facing codes on success,
            user-safe error messages otherwise
        """
        try:
            validation = self.validate(request)
            if not validation.valid:
                reservation_create_failures.labels(reason="validation").inc()
                return CreationResult(success=False, errors=validation.errors)

            pricing = cast(PricingBreakdown, validation.pricing)
            now = self._clock()
            confirmation_code = generate_confirmation_code()
            booking_reference = generate_booking_reference(now)
            row = self._build_row(
                cast(Mapping[str, Any], request),
                pricing,
                check_in_date=cast(date, validation.check_in_date),
                check_out_date=cast(date, validation.check_out_date),
                reservation_id=generate_reservation_id(),
                confirmation_code=confirmation_code,
                booking_reference=booking_reference,
                actor_id=actor_id,
                now=now,
            )

            try:
                inserted = insert_reservation(self._engine, row)
            except ReservationStorageError as e:
                logger.error(
                    "reservation_insert_failed",
                    reservation_id=row["id"],
                    loft_id=row["loft_id"],
                    violation=e.code.value,
                    error=e.detail,
                )
                reservation_create_failures.labels(reason=e.code.value).inc()
                message = INSERT_ERROR_MESSAGES.get(e.code, GENERIC_INSERT_ERROR)
                return CreationResult(success=False, errors=[message])
            except SQLAlchemyError as e:
                logger.exception(
                    "reservation_insert_failed", reservation_id=row["id"], error=str(e)
                )
                reservation_create_failures.labels(reason="unknown").inc()
                return CreationResult(success=False, errors=[GENERIC_INSERT_ERROR])

            record = normalize_reservation_row(inserted)
            reservations_created.labels(booking_source=row["booking_source"]).inc()
            logger.info(
                "reservation_created",
                reservation_id=record["id"],
                loft_id=record["loft_id"],
                booking_reference=booking_reference,
                total_amount=record["pricing"]["total_amount"],
            )

            return CreationResult(
                success=True,
                reservation=record,
                errors=[],
                confirmation_code=confirmation_code,
                booking_reference=booking_reference,
            )

        except Exception as e:
            logger.exception("reservation_create_failed", error=str(e))
            reservation_create_failures.labels(reason="error").inc()
            return CreationResult(success=False, errors=[UNEXPECTED_ERROR])

    def _build_row(
        self,
        request: Mapping[str, Any],
        pricing: PricingBreakdown,
        *,
        check_in_date: date,
        check_out_date: date,
        reservation_id: str,
        confirmation_code: str,
        booking_reference: str,
        actor_id: Optional[str],
        now: datetime,
    ) -> dict[str, Any]:
        return {
            "id": reservation_id,
            "customer_id": actor_id,
            "loft_id": request["loft_id"],
            "check_in_date": check_in_date,
            "check_out_date": check_out_date,
            "nights": pricing.nights,
            "guest_info": request["guest_info"],
            "pricing": pricing.to_dict(),
            "special_requests": request.get("special_requests") or None,
            "dietary_requirements": request.get("dietary_requirements") or None,
            "accessibility_needs": request.get("accessibility_needs") or None,
            "status": ReservationStatus.PENDING.value,
            "payment_status": PaymentStatus.PENDING.value,
            "confirmation_code": confirmation_code,
            "booking_reference": booking_reference,
            "communication_preferences": request.get("communication_preferences")
            or dict(DEFAULT_COMMUNICATION_PREFERENCES),
            "terms_accepted": True,
            "terms_accepted_at": now,
            "terms_version": request.get("terms_version") or DEFAULT_TERMS_VERSION,
            "booking_source": request.get("booking_source") or DEFAULT_BOOKING_SOURCE,
            "user_agent": request.get("user_agent") or None,
            "ip_address": request.get("ip_address") or None,
            "created_at": now,
            "updated_at": now,
            "created_by": actor_id,
            "updated_by": actor_id,
        }

    # ------------------------------------------------------------------
    # Lookup and lifecycle
    # ------------------------------------------------------------------

    def get(self, identifier: str) -> Optional[dict[str, Any]]:
        """
        Fetch a reservation by internal ID, confirmation code or booking reference.

        Returns:
            Optional[dict]: Normalized record, or None if not found or on error
        """
        if not identifier:
            return None

        try:
            row = get_reservation_by_identifier(self._engine, identifier)
            return normalize_reservation_row(row) if row else None
        except Exception as e:
            logger.exception("reservation_lookup_failed", identifier=identifier, error=str(e))
            return None

    def update_status(
        self, reservation_id: str, status: str, updated_by: Optional[str] = None
    ) -> bool:
        """
        Change a reservation's lifecycle status.

        Only transitions in the legality table are applied (pending → confirmed,
        confirmed → completed, ...). Terminal statuses never change again.

        Returns:
            bool: True if the status was changed
        """
        try:
            target = ReservationStatus(status)
        except ValueError:
            logger.warning(
                "reservation_status_unknown", reservation_id=reservation_id, status=status
            )
            return False

        try:
            applied = update_reservation_status(
                self._engine, reservation_id, target, updated_by, self._clock()
            )
        except Exception as e:
            logger.exception(
                "reservation_status_update_failed",
                reservation_id=reservation_id,
                status=target.value,
                error=str(e),
            )
            status_transitions.labels(target=target.value, result="error").inc()
            return False

        status_transitions.labels(
            target=target.value, result="applied" if applied else "rejected"
        ).inc()
        if applied:
            logger.info(
                "reservation_status_updated", reservation_id=reservation_id, status=target.value
            )
        else:
            logger.warning(
                "reservation_status_change_rejected",
                reservation_id=reservation_id,
                status=target.value,
                reason="missing_or_illegal_transition",
            )
        return applied

    def cancel(
        self,
        reservation_id: str,
        reason: Optional[str] = None,
        cancelled_by: Optional[str] = None,
    ) -> bool:
        """
        Cancel a pending or confirmed reservation.

        Returns:
            bool: True if the reservation was cancelled
        """
        target = ReservationStatus.CANCELLED.value

        try:
            cancelled = cancel_reservation(
                self._engine, reservation_id, reason, cancelled_by, self._clock()
            )
        except Exception as e:
            logger.exception(
                "reservation_cancel_failed", reservation_id=reservation_id, error=str(e)
            )
            status_transitions.labels(target=target, result="error").inc()
            return False

        status_transitions.labels(
            target=target, result="applied" if cancelled else "rejected"
        ).inc()
        if cancelled:
            logger.info("reservation_cancelled", reservation_id=reservation_id, reason=reason)
        else:
            logger.warning("reservation_cancel_rejected", reservation_id=reservation_id)
        return cancelled
