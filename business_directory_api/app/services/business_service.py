"""
Business logic for listings: moderation lifecycle and public discovery.

Lifecycle
---------
A listing is created by its owner in the ``pending`` state.  Only an
administrator changes the status, to ``approved`` or ``rejected``, and
may reverse that decision at any time.  The write is an unconditional
overwrite: the current state is not checked, so approving an approved
listing changes nothing, and concurrent decisions are last-writer-wins.

Visibility
----------
A listing appears in search, listing and featured results iff its
status is ``approved``.  Pending and rejected listings are visible to
their owner and to administrators only.

Search
------
Public discovery loads every approved listing and filters/sorts the
result in Python (``filter_and_sort``): case-insensitive substring on
the name, location text against city/state/pincode, category resolved
from a slug or display name, then ordering by rating or review count
(descending, missing values count as zero).  There is no pagination.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from typing import Any, Dict, Iterable, List, Optional

from business_directory_api.app.core.db import get_connection
from business_directory_api.app.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from business_directory_api.app.schemas.business import (
    BUSINESS_STATUSES,
    BusinessCreate,
    BusinessPartitions,
    BusinessRead,
    BusinessUpdate,
    OwnerDashboard,
)
from business_directory_api.app.schemas.category import CategoryBrief
from business_directory_api.app.services.category_service import CategoryService

logger = logging.getLogger(__name__)

_SELECT_BUSINESS = """
    SELECT b.*, c.name AS category_name, c.slug AS category_slug
    FROM businesses b
    LEFT JOIN categories c ON c.id = b.category_id
"""

_WHITESPACE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Lower-case ``name`` and collapse every whitespace run into one hyphen.

    Punctuation is left untouched: ``"My Shop!!"`` becomes ``"my-shop!!"``.
    """
    return _WHITESPACE.sub("-", name.lower())


def _sort_value(value: Optional[float]) -> float:
    return value if value is not None else 0


def filter_and_sort(
    businesses: Iterable[BusinessRead],
    search: Optional[str] = None,
    location: Optional[str] = None,
    category_id: Optional[int] = None,
    sort_by: str = "rating",
) -> List[BusinessRead]:
    """Apply the public search predicates and ordering to ``businesses``.

    All predicates are optional and combine with AND.  ``sort_by`` is
    ``"rating"`` (average rating) or ``"reviews"`` (review count); both
    sort descending and treat a missing value as zero.  The sort is
    stable, so ties keep the input order.
    """
    needle = search.strip().lower() if search and search.strip() else None
    place = location.strip().lower() if location and location.strip() else None

    def matches(business: BusinessRead) -> bool:
        if needle and needle not in business.name.lower():
            return False
        if place:
            haystack = (business.city, business.state, business.pincode or "")
            if not any(place in part.lower() for part in haystack):
                return False
        if category_id is not None and business.category_id != category_id:
            return False
        return True

    selected = [b for b in businesses if matches(b)]
    if sort_by == "reviews":
        selected.sort(key=lambda b: _sort_value(b.total_reviews), reverse=True)
    else:
        selected.sort(key=lambda b: _sort_value(b.average_rating), reverse=True)
    return selected


class BusinessService:
    """Service for business listings."""

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------
    @classmethod
    async def create_business(cls, data: BusinessCreate, current_user: Dict[str, Any]) -> BusinessRead:
        """Register a listing for the calling owner in the ``pending`` state.

        Each owner holds at most one listing.  The slug is derived from
        the name; a clash with an existing slug is reported as a
        conflict, not resolved automatically.
        """
        owner_id = current_user["user_id"]
        slug = slugify(data.name)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if cursor.execute("SELECT id FROM businesses WHERE owner_id = ?", (owner_id,)).fetchone():
                raise ConflictError("This account already has a registered business")
            category_id = cls._category_from_payload(conn, data.category_id, data.category)
            try:
                cursor.execute(
                    """
                    INSERT INTO businesses (
                        name, slug, owner_id, category_id, description, address, city, state,
                        pincode, phone, email, website, opening_hours, logo_url, cover_url, status
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'pending')
                    """,
                    (
                        data.name,
                        slug,
                        owner_id,
                        category_id,
                        data.description,
                        data.address,
                        data.city,
                        data.state,
                        data.pincode,
                        data.phone,
                        data.email,
                        data.website,
                        json.dumps(data.opening_hours) if data.opening_hours is not None else None,
                        data.logo_url,
                        data.cover_url,
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise ConflictError(f"A business with slug '{slug}' already exists") from e
            business_id = cursor.lastrowid
            conn.commit()
            logger.info("Owner %s registered business %s (%s), pending review", owner_id, business_id, slug)
            return cls._fetch(cursor, business_id)
        except Exception as e:
            conn.rollback()
            logger.error("Failed to create business for owner %s: %s", owner_id, e)
            raise
        finally:
            conn.close()

    @classmethod
    async def get_owned_business(cls, owner_id: int) -> BusinessRead:
        conn = get_connection()
        try:
            row = conn.execute(_SELECT_BUSINESS + " WHERE b.owner_id = ?", (owner_id,)).fetchone()
            if not row:
                raise NotFoundError("No business registered for this account")
            return cls._row_to_business(row)
        finally:
            conn.close()

    @classmethod
    async def update_owned_business(cls, owner_id: int, data: BusinessUpdate) -> BusinessRead:
        """Apply a settings edit from the owner dashboard.

        Edits are only accepted while the listing is ``approved``.  The
        slug, owner, status and rating aggregates cannot be changed here.
        """
        updates = data.model_dump(exclude_unset=True)
        for required in ("name", "city", "state"):
            if required in updates and updates[required] is None:
                raise ValueError(f"Field {required} cannot be empty")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                "SELECT id, status FROM businesses WHERE owner_id = ?", (owner_id,)
            ).fetchone()
            if not row:
                raise NotFoundError("No business registered for this account")
            if row["status"] != "approved":
                raise PermissionDeniedError(
                    "Business settings can only be changed once the listing is approved"
                )
            if "category_id" in updates or "category" in updates:
                updates["category_id"] = cls._category_from_payload(
                    conn, updates.get("category_id"), updates.pop("category", None)
                )
            if "opening_hours" in updates and updates["opening_hours"] is not None:
                updates["opening_hours"] = json.dumps(updates["opening_hours"])
            if updates:
                assignments = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(
                    f"UPDATE businesses SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*updates.values(), row["id"]),
                )
                conn.commit()
                logger.info("Owner %s updated business %s (%s)", owner_id, row["id"], ", ".join(updates))
            return cls._fetch(cursor, row["id"])
        finally:
            conn.close()

    @classmethod
    async def owner_dashboard(cls, owner_id: int) -> OwnerDashboard:
        business = await cls.get_owned_business(owner_id)
        conn = get_connection()
        try:
            counts = conn.execute(
                """
                SELECT COUNT(*) AS total, COALESCE(SUM(is_available), 0) AS available
                FROM products WHERE business_id = ?
                """,
                (business.id,),
            ).fetchone()
        finally:
            conn.close()
        return OwnerDashboard(
            business=business,
            products_total=counts["total"],
            products_available=counts["available"],
            average_rating=business.average_rating,
            total_reviews=business.total_reviews,
        )

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------
    @classmethod
    async def set_status(cls, business_id: int, status: str) -> BusinessRead:
        """Overwrite a listing's moderation status.

        Administrator-only; access is enforced by the endpoint.  The
        current status is deliberately not consulted.
        """
        if status not in BUSINESS_STATUSES:
            raise ValueError(f"Unknown status {status}")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE businesses SET status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (status, business_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Business {business_id} not found")
            conn.commit()
            logger.info("Business %s status set to %s", business_id, status)
            return cls._fetch(cursor, business_id)
        finally:
            conn.close()

    @classmethod
    async def list_by_status(cls, status: str) -> List[BusinessRead]:
        """Return every listing in one moderation state, newest first."""
        if status not in BUSINESS_STATUSES:
            raise ValueError(f"Unknown status {status}")
        conn = get_connection()
        try:
            rows = conn.execute(
                _SELECT_BUSINESS + " WHERE b.status = ? ORDER BY b.created_at DESC, b.id DESC",
                (status,),
            ).fetchall()
            return [cls._row_to_business(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def partition_all(cls) -> BusinessPartitions:
        """Load all listings once and group them by status."""
        conn = get_connection()
        try:
            rows = conn.execute(
                _SELECT_BUSINESS + " ORDER BY b.created_at DESC, b.id DESC"
            ).fetchall()
        finally:
            conn.close()
        groups: Dict[str, List[BusinessRead]] = {status: [] for status in BUSINESS_STATUSES}
        for row in rows:
            business = cls._row_to_business(row)
            groups[business.status].append(business)
        return BusinessPartitions(**groups)

    # ------------------------------------------------------------------
    # Public discovery
    # ------------------------------------------------------------------
    @classmethod
    async def search(
        cls,
        search: Optional[str] = None,
        location: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: str = "rating",
    ) -> List[BusinessRead]:
        """Public search over approved listings.

        ``category`` may be a slug or a display name.  A category that
        does not resolve matches no listing.
        """
        conn = get_connection()
        try:
            category_id = None
            if category and category.strip():
                category_id = CategoryService.resolve_category_id(conn, category)
                if category_id is None:
                    return []
            rows = conn.execute(
                _SELECT_BUSINESS + " WHERE b.status = 'approved' ORDER BY b.name COLLATE NOCASE, b.id"
            ).fetchall()
        finally:
            conn.close()
        approved = [cls._row_to_business(row) for row in rows]
        return filter_and_sort(approved, search, location, category_id, sort_by)

    @classmethod
    async def featured(cls, limit: int) -> List[BusinessRead]:
        """Best-rated approved listings for the home page."""
        return (await cls.search(sort_by="rating"))[:limit]

    @classmethod
    async def get_business(cls, business_id: int, viewer: Optional[Dict[str, Any]] = None) -> BusinessRead:
        """Fetch one listing as seen by ``viewer`` (``None`` for anonymous).

        Listings that are not approved are reported as missing to anyone
        but their owner and administrators.
        """
        conn = get_connection()
        try:
            row = conn.execute(_SELECT_BUSINESS + " WHERE b.id = ?", (business_id,)).fetchone()
        finally:
            conn.close()
        if not row or not cls.is_visible_to(row["status"], row["owner_id"], viewer):
            raise NotFoundError(f"Business {business_id} not found")
        return cls._row_to_business(row)

    @staticmethod
    def is_visible_to(status: str, owner_id: int, viewer: Optional[Dict[str, Any]]) -> bool:
        if status == "approved":
            return True
        if viewer is None:
            return False
        return bool(viewer.get("is_admin")) or viewer.get("user_id") == owner_id

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _category_from_payload(
        conn: sqlite3.Connection, category_id: Optional[int], category: Optional[str]
    ) -> Optional[int]:
        if category_id is not None:
            if not conn.execute("SELECT id FROM categories WHERE id = ?", (category_id,)).fetchone():
                raise ValueError(f"Unknown category {category_id}")
            return category_id
        if category is None or not category.strip():
            return None
        resolved = CategoryService.resolve_category_id(conn, category)
        if resolved is None:
            raise ValueError(f"Unknown category {category}")
        return resolved

    @classmethod
    def _fetch(cls, cursor: sqlite3.Cursor, business_id: int) -> BusinessRead:
        row = cursor.execute(_SELECT_BUSINESS + " WHERE b.id = ?", (business_id,)).fetchone()
        return cls._row_to_business(row)

    @staticmethod
    def _row_to_business(row: sqlite3.Row) -> BusinessRead:
        opening_hours = None
        if row["opening_hours"]:
            try:
                opening_hours = json.loads(row["opening_hours"])
            except (TypeError, json.JSONDecodeError):
                opening_hours = None
        category = None
        if row["category_id"] is not None:
            category = CategoryBrief(id=row["category_id"], name=row["category_name"], slug=row["category_slug"])
        return BusinessRead(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            owner_id=row["owner_id"],
            category_id=row["category_id"],
            category=category,
            status=row["status"],
            description=row["description"],
            address=row["address"],
            city=row["city"],
            state=row["state"],
            pincode=row["pincode"],
            phone=row["phone"],
            email=row["email"],
            website=row["website"],
            opening_hours=opening_hours,
            logo_url=row["logo_url"],
            cover_url=row["cover_url"],
            average_rating=row["average_rating"],
            total_reviews=row["total_reviews"] or 0,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
