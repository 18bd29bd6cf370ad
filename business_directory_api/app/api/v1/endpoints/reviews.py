"""
Review endpoints for API v1.

Reviews are created and listed under ``/businesses/{id}/reviews``; this
router handles edits and deletion of an individual review.  Authors
may edit and delete their own reviews, administrators may delete any.
"""

from fastapi import APIRouter, Depends, status

from business_directory_api.app.api.v1.errors import http_error
from business_directory_api.app.core.security import get_current_user
from business_directory_api.app.schemas.review import ReviewRead, ReviewUpdate
from business_directory_api.app.services.review_service import ReviewService

router = APIRouter()


@router.put("/{review_id}", response_model=ReviewRead)
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user: dict = Depends(get_current_user),
) -> ReviewRead:
    try:
        return await ReviewService.update_review(review_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: int,
    current_user: dict = Depends(get_current_user),
) -> None:
    try:
        await ReviewService.delete_review(review_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return None
