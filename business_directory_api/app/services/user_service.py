"""
Identity and session management.

``UserService`` plays the part of the identity provider: it registers
identities, issues sessions on sign-in and ends them on sign-out.  The
account type is stored as a typed column and every identity gets its
profile row in the same transaction it is created in.

Creating the business listing for a business-type account is *not*
part of sign-up: it is a separate round trip
(``BusinessService.create_business``), so a failure there leaves the
identity in place.
"""

import logging
import secrets
import sqlite3
from typing import Any, Dict, Optional, Tuple

from business_directory_api.app.core.config import settings
from business_directory_api.app.core.db import get_connection
from business_directory_api.app.core.exceptions import ConflictError
from business_directory_api.app.core.security import (
    create_access_token,
    hash_password,
    verify_password,
)
from business_directory_api.app.schemas.user import (
    SessionInfo,
    SessionRead,
    SignUpRequest,
    UserRead,
)
from business_directory_api.app.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


def split_name(name: str) -> Tuple[str, Optional[str]]:
    """Split a full name into first name and the remainder."""
    parts = name.split(None, 1)
    first = parts[0] if parts else name
    last = parts[1] if len(parts) > 1 else None
    return first, last


class UserService:
    """Service for identities and their sessions."""

    @classmethod
    async def sign_up(cls, data: SignUpRequest) -> SessionRead:
        """Register an identity, create its profile and open a session.

        Raises ``ConflictError`` when the e-mail is already registered.
        """
        first_name, last_name = split_name(data.name)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    "INSERT INTO users (email, password, user_type) VALUES (?, ?, ?)",
                    (data.email, hash_password(data.password), data.user_type),
                )
            except sqlite3.IntegrityError as e:
                raise ConflictError(f"An account with e-mail {data.email} already exists") from e
            user_id = cursor.lastrowid
            cursor.execute(
                """
                INSERT INTO profiles (id, first_name, last_name, phone, is_business_owner)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, first_name, last_name, data.phone, 1 if data.user_type == "business" else 0),
            )
            session = cls._open_session(cursor, user_id, data.email)
            conn.commit()
            logger.info("Registered %s identity %s (%s)", data.user_type, user_id, data.email)
            user = cls._fetch_user(cursor, user_id)
            return SessionRead(access_token=session, user=user, is_admin=settings.is_admin_email(user.email))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def sign_in(cls, email: str, password: str) -> Optional[SessionRead]:
        """Verify credentials and open a new session.

        Returns ``None`` when the e-mail is unknown or the password is
        wrong; callers must not reveal which.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                "SELECT id, email, password FROM users WHERE email = ?", (email,)
            ).fetchone()
            if not row or not verify_password(password, row["password"]):
                logger.info("Failed sign-in for %s", email)
                return None
            token = cls._open_session(cursor, row["id"], row["email"])
            conn.commit()
            user = cls._fetch_user(cursor, row["id"])
            return SessionRead(access_token=token, user=user, is_admin=settings.is_admin_email(user.email))
        finally:
            conn.close()

    @classmethod
    async def sign_out(cls, current_user: Dict[str, Any]) -> None:
        """End the session the request was authenticated with."""
        conn = get_connection()
        try:
            conn.execute("DELETE FROM sessions WHERE id = ?", (current_user.get("session_id"),))
            conn.commit()
            logger.info("Identity %s signed out", current_user.get("user_id"))
        finally:
            conn.close()

    @classmethod
    async def get_session_info(cls, current_user: Dict[str, Any]) -> SessionInfo:
        """Return the identity, its account type and profile for the caller."""
        conn = get_connection()
        try:
            user = cls._fetch_user(conn.cursor(), current_user["user_id"])
        finally:
            conn.close()
        profile = await ProfileService.find_profile(current_user["user_id"])
        return SessionInfo(user=user, profile=profile, is_admin=bool(current_user.get("is_admin")))

    @staticmethod
    def _open_session(cursor: sqlite3.Cursor, user_id: int, email: str) -> str:
        session_id = secrets.token_hex(16)
        cursor.execute("INSERT INTO sessions (id, user_id) VALUES (?, ?)", (session_id, user_id))
        return create_access_token({"sub": email, "uid": user_id, "sid": session_id})

    @staticmethod
    def _fetch_user(cursor: sqlite3.Cursor, user_id: int) -> UserRead:
        row = cursor.execute(
            "SELECT id, email, user_type, created_at FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return UserRead(
            id=row["id"],
            email=row["email"],
            user_type=row["user_type"],
            created_at=row["created_at"],
        )
