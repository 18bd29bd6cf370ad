"""
Product catalogue endpoints for API v1.

All routes act on the products of the caller's own listing and require
a business account.  The public read of a listing's products is served
by ``GET /businesses/{id}/products``.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from business_directory_api.app.api.v1.errors import http_error
from business_directory_api.app.core.security import require_user_type
from business_directory_api.app.schemas.product import (
    ProductAvailability,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from business_directory_api.app.services.product_service import ProductService

router = APIRouter()

owner_only = require_user_type("business")


@router.get("/", response_model=List[ProductRead])
async def list_my_products(current_user: dict = Depends(owner_only)) -> List[ProductRead]:
    try:
        return await ProductService.list_products(current_user["user_id"])
    except ValueError as e:
        raise http_error(e) from e


@router.post("/", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    current_user: dict = Depends(owner_only),
) -> ProductRead:
    try:
        return await ProductService.create_product(current_user["user_id"], data)
    except ValueError as e:
        raise http_error(e) from e


@router.put("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    current_user: dict = Depends(owner_only),
) -> ProductRead:
    try:
        return await ProductService.update_product(current_user["user_id"], product_id, data)
    except ValueError as e:
        raise http_error(e) from e


@router.patch("/{product_id}/availability", response_model=ProductRead)
async def set_product_availability(
    product_id: int,
    data: ProductAvailability,
    current_user: dict = Depends(owner_only),
) -> ProductRead:
    """Toggle whether the product is offered, leaving every other field alone."""
    try:
        return await ProductService.set_availability(current_user["user_id"], product_id, data.is_available)
    except ValueError as e:
        raise http_error(e) from e


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    current_user: dict = Depends(owner_only),
) -> None:
    try:
        await ProductService.delete_product(current_user["user_id"], product_id)
    except ValueError as e:
        raise http_error(e) from e
    return None
