"""
Service layer for business categories.

Categories are static reference data seeded by ``init_db``.  Clients
refer to them by slug (``grocery``) in URLs and by display name
(``Grocery & Essentials``) in forms, so lookups accept either,
case-insensitively.
"""

from __future__ import annotations

import sqlite3
from typing import List, Optional

from business_directory_api.app.core.db import get_connection
from business_directory_api.app.core.exceptions import NotFoundError
from business_directory_api.app.schemas.category import CategoryRead


class CategoryService:
    """Read access to the category list."""

    @classmethod
    async def list_categories(cls, category: Optional[str] = None) -> List[CategoryRead]:
        """Return all categories ordered by id, or only the one matching ``category``.

        An unknown ``category`` yields an empty list rather than an
        error, mirroring how the category browser renders no cards.
        """
        conn = get_connection()
        try:
            if category:
                rows = conn.execute(
                    "SELECT * FROM categories WHERE lower(slug) = lower(?) OR lower(name) = lower(?) ORDER BY id",
                    (category.strip(), category.strip()),
                ).fetchall()
            else:
                rows = conn.execute("SELECT * FROM categories ORDER BY id").fetchall()
            return [cls._row_to_category(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_category(cls, slug: str) -> CategoryRead:
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM categories WHERE lower(slug) = lower(?)", (slug,)
            ).fetchone()
            if not row:
                raise NotFoundError(f"Category {slug} not found")
            return cls._row_to_category(row)
        finally:
            conn.close()

    @staticmethod
    def resolve_category_id(conn: sqlite3.Connection, value: Optional[str]) -> Optional[int]:
        """Resolve a slug or display name to a category id using ``conn``.

        Returns ``None`` when ``value`` is empty or matches nothing.
        """
        if not value or not value.strip():
            return None
        needle = value.strip()
        row = conn.execute(
            "SELECT id FROM categories WHERE lower(slug) = lower(?) OR lower(name) = lower(?)",
            (needle, needle),
        ).fetchone()
        return row["id"] if row else None

    @staticmethod
    def _row_to_category(row: sqlite3.Row) -> CategoryRead:
        return CategoryRead(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            icon=row["icon"],
            description=row["description"],
        )
