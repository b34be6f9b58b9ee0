# models/reservations.py

from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from loft_reservations.config import SCHEMA
from loft_reservations.models.base import Base


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


# Statuses that block the calendar for other guests
ACTIVE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW}
    ),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
}


def allowed_sources(target: ReservationStatus) -> list[ReservationStatus]:
    """
    Return the statuses a reservation may be in to move to ``target``.

    Args:
        target: Desired new status

    Returns:
        list[ReservationStatus]: Source statuses, empty if nothing may reach target
    """
    return [source for source, targets in ALLOWED_TRANSITIONS.items() if target in targets]


class Reservation(Base):
    """
    ORM model for loft reservations.

    A row is created once, after the request has been validated and priced.
    Afterwards only status fields (and the cancellation stamp) change; rows are
    never deleted. Double booking is prevented by an exclusion constraint on
    (loft_id, daterange(check_in_date, check_out_date)) for active statuses,
    created in the Alembic migration because it needs the btree_gist extension.
    """

    __tablename__ = "reservations"
    __table_args__ = (
        UniqueConstraint("confirmation_code", name="uq_reservations_confirmation_code"),
        UniqueConstraint("booking_reference", name="uq_reservations_booking_reference"),
        CheckConstraint("check_in_date < check_out_date", name="ck_reservations_date_order"),
        {"schema": SCHEMA},
    )

    id = Column(String, primary_key=True)  # res_<millis>_<random>
    customer_id = Column(String, nullable=True, index=True)
    loft_id = Column(
        String,
        ForeignKey(f"{SCHEMA}.lofts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    nights = Column(Integer, nullable=False)
    guest_info = Column(JSONB, nullable=False)
    pricing = Column(JSONB, nullable=False)
    special_requests = Column(Text, nullable=True)
    dietary_requirements = Column(Text, nullable=True)
    accessibility_needs = Column(Text, nullable=True)
    status = Column(String, nullable=False, default=ReservationStatus.PENDING.value)
    payment_status = Column(String, nullable=False, default=PaymentStatus.PENDING.value)
    confirmation_code = Column(String, nullable=False)
    booking_reference = Column(String, nullable=False)
    communication_preferences = Column(JSONB, nullable=False)
    terms_accepted = Column(Boolean, nullable=False)
    terms_accepted_at = Column(DateTime(timezone=True), nullable=False)
    terms_version = Column(String, nullable=False)
    booking_source = Column(String, nullable=False)
    user_agent = Column(Text, nullable=True)
    ip_address = Column(String, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_by = Column(String, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
