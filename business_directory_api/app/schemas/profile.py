"""
Pydantic schemas for profiles.

A profile is the one-to-one companion of an identity holding display
data.  ``is_business_owner`` is set at sign-up from the account type
and is not editable by the user.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    """Editable profile fields; omitted fields are left unchanged."""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=1000)
    phone: Optional[str] = Field(None, max_length=32)


class ProfileRead(BaseModel):
    id: int
    first_name: Optional[str]
    last_name: Optional[str]
    avatar_url: Optional[str]
    bio: Optional[str]
    is_business_owner: bool
    phone: Optional[str]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }
