"""
Pydantic schemas for business listings.

A listing is created by its owner in the ``pending`` state and becomes
publicly discoverable only once an administrator approves it.  The
moderation status, slug, owner and rating aggregates are therefore
absent from the create/update payloads.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .category import CategoryBrief

BusinessStatus = Literal["pending", "approved", "rejected"]
BUSINESS_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected")
SortKey = Literal["rating", "reviews"]


class BusinessBase(BaseModel):
    description: Optional[str] = Field(None, max_length=2000)
    address: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=16)
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[Dict[str, Any]] = None
    logo_url: Optional[str] = None
    cover_url: Optional[str] = None
    # Either the numeric id or a slug/display name ("grocery",
    # "Grocery & Essentials").  ``category_id`` wins when both are set.
    category_id: Optional[int] = None
    category: Optional[str] = None


class BusinessCreate(BusinessBase):
    """Payload for registering a listing."""

    name: str = Field(..., min_length=1, max_length=120)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)

    @field_validator("name", "city", "state")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v


class BusinessUpdate(BusinessBase):
    """Settings edit from the owner dashboard.

    Only fields present in the request are written.  ``city`` and
    ``state`` may be changed but not blanked.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    city: Optional[str] = None
    state: Optional[str] = None

    @field_validator("name", "city", "state")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v


class BusinessRead(BaseModel):
    id: int
    name: str
    slug: str
    owner_id: int
    category_id: Optional[int]
    category: Optional[CategoryBrief]
    status: BusinessStatus
    description: Optional[str]
    address: Optional[str]
    city: str
    state: str
    pincode: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    website: Optional[str]
    opening_hours: Optional[Dict[str, Any]]
    logo_url: Optional[str]
    cover_url: Optional[str]
    average_rating: Optional[float]
    total_reviews: int
    created_at: Optional[str]
    updated_at: Optional[str]

    model_config = {
        "from_attributes": True,
    }


class BusinessStatusUpdate(BaseModel):
    """Moderation decision.  Listings never go back to ``pending``."""

    status: Literal["approved", "rejected"]


class BusinessPartitions(BaseModel):
    """All listings grouped by moderation status (admin tabs)."""

    pending: List[BusinessRead]
    approved: List[BusinessRead]
    rejected: List[BusinessRead]


class OwnerDashboard(BaseModel):
    business: BusinessRead
    products_total: int
    products_available: int
    average_rating: Optional[float]
    total_reviews: int
