"""
Profile endpoints for API v1.

Users read and edit their own profile under ``/profiles/me``.  Reading
another identity's profile is limited to administrators.
"""

from fastapi import APIRouter, Depends

from business_directory_api.app.api.v1.errors import http_error
from business_directory_api.app.core.security import get_current_user
from business_directory_api.app.schemas.profile import ProfileRead, ProfileUpdate
from business_directory_api.app.services.profile_service import ProfileService

router = APIRouter()


@router.get("/me", response_model=ProfileRead)
async def get_my_profile(current_user: dict = Depends(get_current_user)) -> ProfileRead:
    try:
        return await ProfileService.get_profile(current_user["user_id"], current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.put("/me", response_model=ProfileRead)
async def update_my_profile(
    data: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
) -> ProfileRead:
    try:
        return await ProfileService.update_profile(current_user["user_id"], data)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/{user_id}", response_model=ProfileRead)
async def get_profile(user_id: int, current_user: dict = Depends(get_current_user)) -> ProfileRead:
    try:
        return await ProfileService.get_profile(user_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
