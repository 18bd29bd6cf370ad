"""
Business listing endpoints for API v1.

Public routes expose only approved listings: the search used by the
listings page (``search``, ``location``, ``category`` and ``sort_by``
query parameters), the featured strip on the home page and the
detail page.  Owners register their listing here and manage it under
``/businesses/me``.  Moderation lives in the ``admin`` router.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from business_directory_api.app.api.v1.errors import http_error
from business_directory_api.app.core.config import settings
from business_directory_api.app.core.security import (
    get_current_user,
    get_optional_user,
    require_user_type,
)
from business_directory_api.app.schemas.business import (
    BusinessCreate,
    BusinessRead,
    BusinessUpdate,
    OwnerDashboard,
    SortKey,
)
from business_directory_api.app.schemas.product import ProductRead
from business_directory_api.app.schemas.review import ReviewCreate, ReviewRead
from business_directory_api.app.services.business_service import BusinessService
from business_directory_api.app.services.product_service import ProductService
from business_directory_api.app.services.review_service import ReviewService

router = APIRouter()


@router.get("/", response_model=List[BusinessRead])
async def search_businesses(
    search: Optional[str] = Query(None, description="Case-insensitive match on the business name"),
    location: Optional[str] = Query(None, description="Matched against city, state and pincode"),
    category: Optional[str] = Query(None, description="Category slug or display name"),
    sort_by: SortKey = Query("rating", description="'rating' or 'reviews', both descending"),
) -> List[BusinessRead]:
    """Search approved listings.  The full matching set is returned."""
    return await BusinessService.search(
        search=search,
        location=location,
        category=category,
        sort_by=sort_by,
    )


@router.get("/featured", response_model=List[BusinessRead])
async def featured_businesses(
    limit: Optional[int] = Query(None, ge=1, le=50),
) -> List[BusinessRead]:
    return await BusinessService.featured(limit or settings.featured_limit)


@router.post("/", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
async def create_business(
    data: BusinessCreate,
    current_user: dict = Depends(require_user_type("business")),
) -> BusinessRead:
    """Register the caller's listing.  It starts out ``pending``."""
    try:
        return await BusinessService.create_business(data, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/me", response_model=BusinessRead)
async def get_my_business(
    current_user: dict = Depends(require_user_type("business")),
) -> BusinessRead:
    """The owner's listing in whatever moderation state it is in."""
    try:
        return await BusinessService.get_owned_business(current_user["user_id"])
    except ValueError as e:
        raise http_error(e) from e


@router.put("/me", response_model=BusinessRead)
async def update_my_business(
    data: BusinessUpdate,
    current_user: dict = Depends(require_user_type("business")),
) -> BusinessRead:
    """Edit listing settings.  Refused with 403 until the listing is approved."""
    try:
        return await BusinessService.update_owned_business(current_user["user_id"], data)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/me/dashboard", response_model=OwnerDashboard)
async def my_dashboard(
    current_user: dict = Depends(require_user_type("business")),
) -> OwnerDashboard:
    try:
        return await BusinessService.owner_dashboard(current_user["user_id"])
    except ValueError as e:
        raise http_error(e) from e


@router.get("/{business_id}", response_model=BusinessRead)
async def get_business(
    business_id: int,
    viewer: Optional[dict] = Depends(get_optional_user),
) -> BusinessRead:
    """Listing detail.  Unapproved listings are 404 except for owner and admins."""
    try:
        return await BusinessService.get_business(business_id, viewer)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/{business_id}/products", response_model=List[ProductRead])
async def list_business_products(business_id: int) -> List[ProductRead]:
    try:
        return await ProductService.list_public_products(business_id)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/{business_id}/reviews", response_model=List[ReviewRead])
async def list_business_reviews(business_id: int) -> List[ReviewRead]:
    try:
        return await ReviewService.list_reviews(business_id)
    except ValueError as e:
        raise http_error(e) from e


@router.post(
    "/{business_id}/reviews",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_business_review(
    business_id: int,
    data: ReviewCreate,
    current_user: dict = Depends(get_current_user),
) -> ReviewRead:
    """Review an approved listing.  One review per user and listing."""
    try:
        return await ReviewService.create_review(business_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e
