"""SQLAlchemy model for rentable lofts (read-only reference data)."""

from sqlalchemy import TIMESTAMP, Boolean, Column, Integer, Numeric, String, text

from loft_reservations.config import SCHEMA
from loft_reservations.models.base import Base


class Loft(Base):
    """
    ORM model for lofts that can be booked.

    Lofts are owned and maintained by the property-management side of the
    platform. This service only reads them to price and validate reservations,
    so nothing here writes to the table.
    """

    __tablename__ = "lofts"
    __table_args__ = {"schema": SCHEMA}

    id = Column(String, primary_key=True)  # UUID or short slug-style ID
    name = Column(String, nullable=False)
    price_per_night = Column(Numeric(12, 2), nullable=False)
    cleaning_fee = Column(Numeric(12, 2), nullable=True)
    tax_rate = Column(Numeric(5, 2), nullable=True)  # Percentage, NULL means default
    max_guests = Column(Integer, nullable=False, server_default=text("1"))
    minimum_stay = Column(Integer, nullable=False, server_default=text("1"))
    maximum_stay = Column(Integer, nullable=True)
    status = Column(String, nullable=False, server_default=text("'available'"))
    is_published = Column(Boolean, nullable=False, server_default=text("FALSE"))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))
