"""
Business logic for reviews.

Any signed-in identity except the owner may review an approved
listing, once.  The listing's ``average_rating`` and ``total_reviews``
are recomputed from the ``reviews`` table inside the same transaction
as every review insert, update and delete, so the aggregates always
match the rows they summarise.
"""

import logging
import sqlite3
from typing import Any, Dict, List

from business_directory_api.app.core.db import get_connection
from business_directory_api.app.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from business_directory_api.app.schemas.review import ReviewCreate, ReviewRead, ReviewUpdate

logger = logging.getLogger(__name__)


def refresh_rating_aggregates(cursor: sqlite3.Cursor, business_id: int) -> None:
    """Recompute a listing's rating mean (2 decimals) and review count.

    The caller owns the transaction; nothing is committed here.  With
    no reviews left the mean becomes NULL and the count zero.
    """
    cursor.execute(
        """
        UPDATE businesses SET
            average_rating = (SELECT ROUND(AVG(rating), 2) FROM reviews WHERE business_id = ?),
            total_reviews = (SELECT COUNT(*) FROM reviews WHERE business_id = ?)
        WHERE id = ?
        """,
        (business_id, business_id, business_id),
    )


class ReviewService:
    """Service for listing reviews."""

    @classmethod
    async def create_review(
        cls,
        business_id: int,
        data: ReviewCreate,
        current_user: Dict[str, Any],
    ) -> ReviewRead:
        user_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            business = cursor.execute(
                "SELECT id, owner_id, status FROM businesses WHERE id = ?", (business_id,)
            ).fetchone()
            if not business or business["status"] != "approved":
                raise NotFoundError(f"Business {business_id} not found")
            if business["owner_id"] == user_id:
                raise PermissionDeniedError("Owners cannot review their own business")
            try:
                cursor.execute(
                    "INSERT INTO reviews (business_id, user_id, rating, comment) VALUES (?, ?, ?, ?)",
                    (business_id, user_id, data.rating, data.comment),
                )
            except sqlite3.IntegrityError as e:
                raise ConflictError("You have already reviewed this business") from e
            review_id = cursor.lastrowid
            refresh_rating_aggregates(cursor, business_id)
            conn.commit()
            logger.info("User %s reviewed business %s (rating %s)", user_id, business_id, data.rating)
            return cls._fetch(cursor, review_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def list_reviews(cls, business_id: int) -> List[ReviewRead]:
        """Reviews of an approved listing, newest first."""
        conn = get_connection()
        try:
            business = conn.execute(
                "SELECT status FROM businesses WHERE id = ?", (business_id,)
            ).fetchone()
            if not business or business["status"] != "approved":
                raise NotFoundError(f"Business {business_id} not found")
            rows = conn.execute(
                "SELECT * FROM reviews WHERE business_id = ? ORDER BY created_at DESC, id DESC",
                (business_id,),
            ).fetchall()
            return [cls._row_to_review(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def update_review(
        cls,
        review_id: int,
        data: ReviewUpdate,
        current_user: Dict[str, Any],
    ) -> ReviewRead:
        """Edit the caller's own review."""
        updates = data.model_dump(exclude_unset=True)
        if "rating" in updates and updates["rating"] is None:
            raise ValueError("Rating cannot be empty")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cls._get_row(cursor, review_id)
            if row["user_id"] != current_user.get("user_id"):
                raise PermissionDeniedError("Not authorized to edit this review")
            if updates:
                assignments = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(
                    f"UPDATE reviews SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*updates.values(), review_id),
                )
                refresh_rating_aggregates(cursor, row["business_id"])
                conn.commit()
                logger.info("Review %s updated", review_id)
            return cls._fetch(cursor, review_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def delete_review(cls, review_id: int, current_user: Dict[str, Any]) -> None:
        """Delete a review.  Authors delete their own; admins delete any."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cls._get_row(cursor, review_id)
            if row["user_id"] != current_user.get("user_id") and not current_user.get("is_admin"):
                raise PermissionDeniedError("Not authorized to delete this review")
            cursor.execute("DELETE FROM reviews WHERE id = ?", (review_id,))
            refresh_rating_aggregates(cursor, row["business_id"])
            conn.commit()
            logger.info("Review %s deleted by %s", review_id, current_user.get("user_id"))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def _get_row(cursor: sqlite3.Cursor, review_id: int) -> sqlite3.Row:
        row = cursor.execute("SELECT * FROM reviews WHERE id = ?", (review_id,)).fetchone()
        if not row:
            raise NotFoundError(f"Review {review_id} not found")
        return row

    @classmethod
    def _fetch(cls, cursor: sqlite3.Cursor, review_id: int) -> ReviewRead:
        return cls._row_to_review(cls._get_row(cursor, review_id))

    @staticmethod
    def _row_to_review(row: sqlite3.Row) -> ReviewRead:
        return ReviewRead(
            id=row["id"],
            business_id=row["business_id"],
            user_id=row["user_id"],
            rating=row["rating"],
            comment=row["comment"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
