"""
Business logic for a listing's product catalogue.

Owners manage the products of their one listing.  ``is_available`` can
be flipped on its own without touching other fields, and deletion is a
hard delete.  Prices are kept as optional non-negative decimals;
``None`` means the price is not listed.
"""

import logging
import sqlite3
from decimal import Decimal
from typing import List, Optional

from business_directory_api.app.core.db import get_connection
from business_directory_api.app.core.exceptions import NotFoundError
from business_directory_api.app.schemas.product import (
    ProductCreate,
    ProductRead,
    ProductUpdate,
)

logger = logging.getLogger(__name__)


def _price_to_db(price: Optional[Decimal]) -> Optional[float]:
    return float(price) if price is not None else None


def _price_from_db(value: Optional[float]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"))


class ProductService:
    """Service for the owner-scoped product catalogue."""

    @classmethod
    async def list_products(cls, owner_id: int) -> List[ProductRead]:
        """All products of the owner's listing, available or not."""
        conn = get_connection()
        try:
            business_id = cls._owned_business_id(conn, owner_id)
            rows = conn.execute(
                "SELECT * FROM products WHERE business_id = ? ORDER BY id", (business_id,)
            ).fetchall()
            return [cls._row_to_product(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def list_public_products(cls, business_id: int) -> List[ProductRead]:
        """Products of an approved listing as shown on its public page."""
        conn = get_connection()
        try:
            business = conn.execute(
                "SELECT status FROM businesses WHERE id = ?", (business_id,)
            ).fetchone()
            if not business or business["status"] != "approved":
                raise NotFoundError(f"Business {business_id} not found")
            rows = conn.execute(
                "SELECT * FROM products WHERE business_id = ? ORDER BY is_available DESC, id",
                (business_id,),
            ).fetchall()
            return [cls._row_to_product(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def create_product(cls, owner_id: int, data: ProductCreate) -> ProductRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            business_id = cls._owned_business_id(conn, owner_id)
            cursor.execute(
                """
                INSERT INTO products (business_id, name, description, price, image_url, is_available)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    business_id,
                    data.name,
                    data.description,
                    _price_to_db(data.price),
                    data.image_url,
                    1 if data.is_available else 0,
                ),
            )
            product_id = cursor.lastrowid
            conn.commit()
            logger.info("Added product %s to business %s", product_id, business_id)
            return cls._fetch(cursor, product_id)
        finally:
            conn.close()

    @classmethod
    async def update_product(cls, owner_id: int, product_id: int, data: ProductUpdate) -> ProductRead:
        """Write the fields present in ``data``; an explicit ``price: null`` unlists the price."""
        updates = data.model_dump(exclude_unset=True)
        if "name" in updates and updates["name"] is None:
            raise ValueError("Product name cannot be empty")
        if "price" in updates:
            updates["price"] = _price_to_db(updates["price"])
        if "is_available" in updates:
            updates["is_available"] = 1 if updates["is_available"] else 0
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._owned_product(conn, owner_id, product_id)
            if updates:
                assignments = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(
                    f"UPDATE products SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*updates.values(), product_id),
                )
                conn.commit()
                logger.info("Updated product %s (%s)", product_id, ", ".join(updates))
            return cls._fetch(cursor, product_id)
        finally:
            conn.close()

    @classmethod
    async def set_availability(cls, owner_id: int, product_id: int, is_available: bool) -> ProductRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._owned_product(conn, owner_id, product_id)
            cursor.execute(
                "UPDATE products SET is_available = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (1 if is_available else 0, product_id),
            )
            conn.commit()
            logger.info("Product %s availability set to %s", product_id, is_available)
            return cls._fetch(cursor, product_id)
        finally:
            conn.close()

    @classmethod
    async def delete_product(cls, owner_id: int, product_id: int) -> None:
        conn = get_connection()
        try:
            cls._owned_product(conn, owner_id, product_id)
            conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
            conn.commit()
            logger.info("Deleted product %s", product_id)
        finally:
            conn.close()

    @staticmethod
    def _owned_business_id(conn: sqlite3.Connection, owner_id: int) -> int:
        row = conn.execute("SELECT id FROM businesses WHERE owner_id = ?", (owner_id,)).fetchone()
        if not row:
            raise NotFoundError("No business registered for this account")
        return row["id"]

    @classmethod
    def _owned_product(cls, conn: sqlite3.Connection, owner_id: int, product_id: int) -> sqlite3.Row:
        """Return the product row if it belongs to the owner's listing.

        Products of other listings are reported as missing.
        """
        business_id = cls._owned_business_id(conn, owner_id)
        row = conn.execute(
            "SELECT * FROM products WHERE id = ? AND business_id = ?", (product_id, business_id)
        ).fetchone()
        if not row:
            raise NotFoundError(f"Product {product_id} not found")
        return row

    @classmethod
    def _fetch(cls, cursor: sqlite3.Cursor, product_id: int) -> ProductRead:
        row = cursor.execute("SELECT * FROM products WHERE id = ?", (product_id,)).fetchone()
        return cls._row_to_product(row)

    @staticmethod
    def _row_to_product(row: sqlite3.Row) -> ProductRead:
        return ProductRead(
            id=row["id"],
            business_id=row["business_id"],
            name=row["name"],
            description=row["description"],
            price=_price_from_db(row["price"]),
            image_url=row["image_url"],
            is_available=bool(row["is_available"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
