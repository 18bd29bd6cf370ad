"""
SQLite database integration and simple migration system.

This module provides ``get_connection`` for services, a ``get_cursor``
context manager for one-shot statements and ``init_db`` which applies
versioned migrations on start-up and seeds the static category list.

Applied migration versions are stored in the ``migrations`` table and
new ones are executed in order.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings


# Static reference data: (name, slug, icon, description).
CATEGORIES: list[tuple[str, str, str, str]] = [
    ("Grocery & Essentials", "grocery", "shopping-bag",
     "Find local grocery stores and essential item providers near you"),
    ("Food & Beverages", "food", "utensils",
     "Explore restaurants, cafes, and food services in your area"),
    ("Clothing & Fashion", "clothing", "shirt",
     "Discover local clothing stores, tailors, and fashion boutiques"),
    ("Home & Furniture", "home", "home",
     "Find furniture stores and home decor businesses nearby"),
    ("Services & Repairs", "services", "wrench",
     "Connect with local service providers and repair professionals"),
    ("Health & Wellness", "health", "stethoscope",
     "Locate healthcare providers, pharmacies, and wellness centers"),
    ("Beauty & Personal Care", "beauty", "scissors",
     "Find salons, spas, and personal care services in your community"),
    ("Education & Learning", "education", "book",
     "Discover schools, tutoring services, and educational resources"),
    ("Electronics & Tech", "electronics", "laptop",
     "Connect with electronics stores and tech service providers"),
]


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: identities, sessions and profiles
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            user_type TEXT NOT NULL CHECK (user_type IN ('customer', 'business')),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS sessions (
            id TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS profiles (
            id INTEGER PRIMARY KEY,
            first_name TEXT,
            last_name TEXT,
            avatar_url TEXT,
            bio TEXT,
            is_business_owner INTEGER NOT NULL DEFAULT 0,
            phone TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(id) REFERENCES users(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: directory tables
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            slug TEXT NOT NULL UNIQUE,
            icon TEXT,
            description TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS businesses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            slug TEXT NOT NULL UNIQUE,
            owner_id INTEGER NOT NULL UNIQUE,
            category_id INTEGER,
            description TEXT,
            address TEXT,
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            pincode TEXT,
            phone TEXT,
            email TEXT,
            website TEXT,
            opening_hours TEXT,
            logo_url TEXT,
            cover_url TEXT,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'approved', 'rejected')),
            average_rating REAL,
            total_reviews INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(owner_id) REFERENCES users(id),
            FOREIGN KEY(category_id) REFERENCES categories(id)
        );

        CREATE TABLE IF NOT EXISTS products (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            description TEXT,
            price REAL CHECK (price IS NULL OR price >= 0),
            image_url TEXT,
            is_available INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(business_id) REFERENCES businesses(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS reviews (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            business_id INTEGER NOT NULL,
            user_id INTEGER NOT NULL,
            rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
            comment TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(business_id, user_id),
            FOREIGN KEY(business_id) REFERENCES businesses(id) ON DELETE CASCADE,
            FOREIGN KEY(user_id) REFERENCES users(id)
        );
        """,
    ),
    # Migration 3: lookup indices
    (
        3,
        """
        CREATE INDEX IF NOT EXISTS idx_businesses_status ON businesses(status);
        CREATE INDEX IF NOT EXISTS idx_businesses_category_id ON businesses(category_id);
        CREATE INDEX IF NOT EXISTS idx_products_business_id ON products(business_id);
        CREATE INDEX IF NOT EXISTS idx_reviews_business_id ON reviews(business_id);
        CREATE INDEX IF NOT EXISTS idx_sessions_user_id ON sessions(user_id);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    Absolute paths in ``settings.database_url`` are used as is; relative
    ones are resolved against the package root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # business_directory_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be read by name.
    Foreign key enforcement is off by default in SQLite and has to be
    switched on for every connection.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and commits/closes on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    """Create the schema, apply pending migrations and seed categories."""
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                current_version = version

        cursor.executemany(
            "INSERT OR IGNORE INTO categories (name, slug, icon, description) VALUES (?, ?, ?, ?)",
            CATEGORIES,
        )
