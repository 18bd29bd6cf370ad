"""
Pydantic models for identities, sessions and sign-up.

The account type (``customer`` or ``business``) is a typed column on the
identity instead of free-form metadata, and the rest of the personal
data lives in the profile (see ``schemas.profile``).
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .profile import ProfileRead

UserType = Literal["customer", "business"]


class SignUpRequest(BaseModel):
    """Registration form.

    ``confirm_password`` and ``accept_terms`` are checked here so that a
    mismatch or an unticked box is rejected before anything is written.
    """

    email: str = Field(..., min_length=3, description="Login e-mail address")
    password: str = Field(..., min_length=6)
    confirm_password: str
    accept_terms: bool = Field(False, description="Terms and conditions accepted")
    user_type: UserType = "customer"
    name: str = Field(..., min_length=1, description="Full name of the person registering")
    phone: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid e-mail address")
        return v

    @field_validator("name", "phone")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    @model_validator(mode="after")
    def check_form(self) -> "SignUpRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if not self.accept_terms:
            raise ValueError("Please agree to the terms and conditions")
        return self


class SignInRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRead(BaseModel):
    """Identity as exposed to clients."""

    id: int
    email: str
    user_type: UserType
    created_at: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class SessionRead(BaseModel):
    """A session: the bearer token, the identity it belongs to and its admin flag."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead
    is_admin: bool = False


class SessionInfo(BaseModel):
    """Current session as seen by ``GET /auth/session``."""

    user: UserRead
    profile: Optional[ProfileRead]
    is_admin: bool
