"""
Pydantic schemas for a listing's product catalogue.

``price`` is optional: a product without a price is shown as "Price not
listed", which is not the same thing as a product that costs nothing.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator

PRICE_NOT_LISTED = "Price not listed"
CURRENCY_SYMBOL = "₹"


def format_price(price: Optional[Decimal]) -> str:
    if price is None:
        return PRICE_NOT_LISTED
    return f"{CURRENCY_SYMBOL}{price:.2f}"


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[Decimal] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_available: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product name is required")
        return v


class ProductUpdate(BaseModel):
    """Partial update.  Send ``"price": null`` to unlist the price."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[Decimal] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Product name is required")
        return v


class ProductAvailability(BaseModel):
    is_available: bool


class ProductRead(BaseModel):
    id: int
    business_id: int
    name: str
    description: Optional[str]
    price: Optional[Decimal]
    image_url: Optional[str]
    is_available: bool
    created_at: Optional[str]
    updated_at: Optional[str]

    model_config = {
        "from_attributes": True,
    }

    @computed_field  # type: ignore[misc]
    @property
    def price_label(self) -> str:
        return format_price(self.price)
