"""
Service layer for profiles.

Profiles are keyed by identity id.  Users read and edit their own
profile; administrators may read anybody's.
"""

import logging
import sqlite3
from typing import Any, Dict, Optional

from business_directory_api.app.core.db import get_connection
from business_directory_api.app.core.exceptions import NotFoundError, PermissionDeniedError
from business_directory_api.app.schemas.profile import ProfileRead, ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:

    @classmethod
    async def find_profile(cls, user_id: int) -> Optional[ProfileRead]:
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM profiles WHERE id = ?", (user_id,)).fetchone()
            return cls._row_to_profile(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def get_profile(cls, user_id: int, current_user: Dict[str, Any]) -> ProfileRead:
        """Fetch a profile, enforcing self-or-admin access."""
        if user_id != current_user.get("user_id") and not current_user.get("is_admin"):
            raise PermissionDeniedError("Not authorized to view this profile")
        profile = await cls.find_profile(user_id)
        if profile is None:
            raise NotFoundError(f"Profile {user_id} not found")
        return profile

    @classmethod
    async def update_profile(cls, user_id: int, data: ProfileUpdate) -> ProfileRead:
        """Write the fields present in ``data`` and return the new profile."""
        updates = data.model_dump(exclude_unset=True)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT id FROM profiles WHERE id = ?", (user_id,)).fetchone():
                raise NotFoundError(f"Profile {user_id} not found")
            if updates:
                assignments = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(
                    f"UPDATE profiles SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*updates.values(), user_id),
                )
                conn.commit()
                logger.info("Updated profile %s (%s)", user_id, ", ".join(updates))
            row = cursor.execute("SELECT * FROM profiles WHERE id = ?", (user_id,)).fetchone()
            return cls._row_to_profile(row)
        finally:
            conn.close()

    @staticmethod
    def _row_to_profile(row: sqlite3.Row) -> ProfileRead:
        return ProfileRead(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            avatar_url=row["avatar_url"],
            bio=row["bio"],
            is_business_owner=bool(row["is_business_owner"]),
            phone=row["phone"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
