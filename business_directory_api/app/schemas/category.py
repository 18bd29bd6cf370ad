"""Pydantic schemas for business categories (static reference data)."""

from typing import Optional

from pydantic import BaseModel


class CategoryBrief(BaseModel):
    """Category as embedded in a business listing."""

    id: int
    name: str
    slug: str


class CategoryRead(CategoryBrief):
    icon: Optional[str]
    description: Optional[str]

    model_config = {
        "from_attributes": True,
    }
