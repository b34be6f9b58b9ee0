from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from loft_reservations.dependencies import get_reservation_service
from loft_reservations.schemas.reservations import (
    CancelPayload,
    ReservationPayload,
    StatusUpdatePayload,
)
from loft_reservations.services.reservations import (
    GENERIC_INSERT_ERROR,
    INSERT_ERROR_MESSAGES,
    UNAVAILABLE_ERROR,
    UNEXPECTED_ERROR,
    ReservationService,
)

logger = structlog.get_logger(__name__)
router = APIRouter()

CONFLICT_ERRORS = {UNAVAILABLE_ERROR, *INSERT_ERROR_MESSAGES.values()}
SERVER_ERRORS = {GENERIC_INSERT_ERROR, UNEXPECTED_ERROR}


def _request_data(payload: ReservationPayload, request: Request) -> dict[str, Any]:
    """Dump the payload, filling client metadata from the HTTP request when absent."""
    data = payload.model_dump()
    if not data.get("user_agent"):
        data["user_agent"] = request.headers.get("user-agent")
    if not data.get("ip_address") and request.client:
        data["ip_address"] = request.client.host
    return data


def _failure_status(errors: list[str]) -> int:
    if any(error in CONFLICT_ERRORS for error in errors):
        return status.HTTP_409_CONFLICT
    if any(error in SERVER_ERRORS for error in errors):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_422_UNPROCESSABLE_ENTITY


@router.post("/reservations/quote", status_code=status.HTTP_200_OK)
def quote_reservation(
    payload: ReservationPayload,
    request: Request,
    service: ReservationService = Depends(get_reservation_service),
) -> dict[str, Any]:
    """
    Validate a reservation request and return its price quote.

    Nothing is persisted. The response always carries whatever was computed
    (loft, pricing, nights) so a client can show a price preview next to the
    validation errors.

    Args:
        payload: Reservation request
        request: Incoming HTTP request
        service: Reservation service for this request

    Returns:
        dict: valid flag, errors, loft, pricing, nights and stay dates
    """
    try:
        result = service.validate(_request_data(payload, request))
        return result.to_dict()

    except Exception as e:
        logger.exception("reservation_quote_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reservations", status_code=status.HTTP_201_CREATED)
def create_reservation(
    payload: ReservationPayload,
    request: Request,
    service: ReservationService = Depends(get_reservation_service),
    user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> Any:
    """
    Create a reservation.

    Args:
        payload: Reservation request
        request: Incoming HTTP request
        service: Reservation service for this request
        user_id: Authenticated customer, recorded as customer and creator

    Returns:
        201 with the stored reservation, confirmation code and booking reference;
        409 for availability or constraint conflicts; 422 for validation errors
    """
    try:
        result = service.create(_request_data(payload, request), actor_id=user_id)

        if not result.success:
            logger.info(
                "reservation_create_rejected", loft_id=payload.loft_id, errors=result.errors
            )
            return JSONResponse(
                status_code=_failure_status(result.errors), content=result.to_dict()
            )

        return result.to_dict()

    except Exception as e:
        logger.exception("reservation_create_request_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations/{identifier}", status_code=status.HTTP_200_OK)
def get_reservation(
    identifier: str,
    service: ReservationService = Depends(get_reservation_service),
) -> dict[str, Any]:
    """
    Fetch a reservation by internal ID, confirmation code or booking reference.

    Args:
        identifier: Any of the reservation's three identifiers
        service: Reservation service for this request

    Returns:
        dict: Reservation record
    """
    try:
        record = service.get(identifier)
        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found"
            )
        return record

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("reservation_fetch_failed", identifier=identifier, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/reservations/{reservation_id}/status", status_code=status.HTTP_200_OK)
def update_reservation_status(
    reservation_id: str,
    payload: StatusUpdatePayload,
    service: ReservationService = Depends(get_reservation_service),
) -> dict[str, str]:
    """
    Move a reservation to a new lifecycle status.

    Returns:
        dict: Confirmation message; 409 if the reservation is missing or the
        transition is not allowed from its current status
    """
    try:
        if not service.update_status(reservation_id, payload.status.value, payload.updated_by):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Reservation {reservation_id} cannot be moved to {payload.status.value}",
            )

        return {"message": f"Reservation {reservation_id} is now {payload.status.value}"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            "reservation_status_request_failed", reservation_id=reservation_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reservations/{reservation_id}/cancel", status_code=status.HTTP_200_OK)
def cancel_reservation(
    reservation_id: str,
    payload: CancelPayload,
    service: ReservationService = Depends(get_reservation_service),
) -> dict[str, str]:
    """
    Cancel a pending or confirmed reservation.

    Returns:
        dict: Confirmation message; 409 if missing or already final
    """
    try:
        if not service.cancel(reservation_id, payload.reason, payload.cancelled_by):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Reservation {reservation_id} cannot be cancelled",
            )

        return {"message": f"Reservation {reservation_id} cancelled"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            "reservation_cancel_request_failed", reservation_id=reservation_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")
