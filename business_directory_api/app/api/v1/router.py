"""
Top-level router for version 1 of the API.

This router aggregates domain-specific routers (auth, businesses,
products, reviews, etc.) under a unified prefix.  When new endpoints
are added, update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import (
    auth,
    profiles,
    categories,
    products,
    businesses,
    reviews,
    admin,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
# Must precede the businesses router so that ``/businesses/me/products``
# is not captured by ``/businesses/{business_id}/products``.
router.include_router(products.router, prefix="/businesses/me/products", tags=["products"])
router.include_router(businesses.router, prefix="/businesses", tags=["businesses"])
router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
