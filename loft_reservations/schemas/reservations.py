from typing import Any, Optional

from pydantic import BaseModel, Field

from loft_reservations.models.reservations import ReservationStatus


class CommunicationPreferences(BaseModel):
    email: bool = True
    sms: bool = False
    whatsapp: bool = False


class ReservationPayload(BaseModel):
    """
    Schema for a reservation request.

    Fields are deliberately permissive: shape and business errors are reported
    by the validation pipeline as a list of messages rather than by FastAPI.
    """

    loft_id: Optional[str] = Field(None, description="Loft to book")
    check_in_date: Optional[str] = Field(None, description="ISO-8601 check-in date")
    check_out_date: Optional[str] = Field(None, description="ISO-8601 check-out date")
    guests: Optional[int] = Field(None, description="Must equal guest_info.total_guests")
    guest_info: Optional[dict[str, Any]] = Field(None, description="Primary guest and guest counts")
    special_requests: Optional[str] = None
    dietary_requirements: Optional[str] = None
    accessibility_needs: Optional[str] = None
    terms_accepted: Optional[Any] = Field(None, description="Must be exactly true")
    terms_version: Optional[str] = None
    communication_preferences: Optional[CommunicationPreferences] = None
    booking_source: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class StatusUpdatePayload(BaseModel):
    status: ReservationStatus = Field(..., description="Target lifecycle status")
    updated_by: Optional[str] = Field(None, description="User making the change")


class CancelPayload(BaseModel):
    reason: Optional[str] = Field(None, description="Free-text cancellation reason")
    cancelled_by: Optional[str] = Field(None, description="User cancelling the reservation")
