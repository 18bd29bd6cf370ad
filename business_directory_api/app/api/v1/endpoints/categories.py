"""Category endpoints for API v1.  Public, read-only."""

from typing import List, Optional

from fastapi import APIRouter, Query

from business_directory_api.app.api.v1.errors import http_error
from business_directory_api.app.schemas.category import CategoryRead
from business_directory_api.app.services.category_service import CategoryService

router = APIRouter()


@router.get("/", response_model=List[CategoryRead])
async def list_categories(
    category: Optional[str] = Query(None, description="Restrict to one category slug or name"),
) -> List[CategoryRead]:
    return await CategoryService.list_categories(category)


@router.get("/{slug}", response_model=CategoryRead)
async def get_category(slug: str) -> CategoryRead:
    try:
        return await CategoryService.get_category(slug)
    except ValueError as e:
        raise http_error(e) from e
