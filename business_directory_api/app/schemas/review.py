"""
Pydantic schemas for business reviews.

Each identity may hold one review per business.  Comments are trimmed
and length-limited on input and returned as stored; escaping is the
renderer's job.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _clean_comment(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if len(v) > 1000:
        raise ValueError("Comment must be 1000 characters or fewer")
    return v or None


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, description="Optional textual comment")

    @field_validator("comment")
    @classmethod
    def sanitize_comment(cls, v: Optional[str]) -> Optional[str]:
        return _clean_comment(v)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def sanitize_comment(cls, v: Optional[str]) -> Optional[str]:
        return _clean_comment(v)


class ReviewRead(BaseModel):
    id: int
    business_id: int
    user_id: int
    rating: int
    comment: Optional[str]
    created_at: str
    updated_at: Optional[str]

    model_config = {
        "from_attributes": True,
    }
