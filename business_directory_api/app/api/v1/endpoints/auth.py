"""
Authentication endpoints for API v1.

Sign-up creates the identity together with its profile and returns a
session; sign-in opens a new session; sign-out ends the session the
request was made with.  ``GET /auth/session`` is what clients call on
every session change to learn the account type and load the profile.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from business_directory_api.app.api.v1.errors import http_error
from business_directory_api.app.core.security import get_current_user
from business_directory_api.app.schemas.user import (
    SessionInfo,
    SessionRead,
    SignInRequest,
    SignUpRequest,
)
from business_directory_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/signup", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
async def sign_up(data: SignUpRequest) -> SessionRead:
    """Register a customer or business identity.

    Business accounts register their listing with a second call to
    ``POST /businesses``.
    """
    try:
        return await UserService.sign_up(data)
    except ValueError as e:
        raise http_error(e) from e


@router.post("/signin", response_model=SessionRead)
async def sign_in(data: SignInRequest) -> SessionRead:
    session = await UserService.sign_in(data.email, data.password)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return session


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(current_user: dict = Depends(get_current_user)) -> None:
    await UserService.sign_out(current_user)
    return None


@router.get("/session", response_model=SessionInfo)
async def current_session(current_user: dict = Depends(get_current_user)) -> SessionInfo:
    """Return the caller's identity, account type, profile and admin flag."""
    return await UserService.get_session_info(current_user)
