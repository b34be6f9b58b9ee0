from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoftSnapshot(BaseModel):
    """
    Read-only view of a loft as used for pricing and booking rules.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str = ""
    price_per_night: Decimal = Field(..., description="Nightly rate in the booking currency")
    cleaning_fee: Optional[Decimal] = Field(None, description="Flat fee per stay")
    tax_rate: Optional[Decimal] = Field(
        None, description="Tax percentage, default applies when unset"
    )
    max_guests: int = 1
    minimum_stay: int = 1
    maximum_stay: Optional[int] = None
    status: str = "available"
    is_published: bool = False
