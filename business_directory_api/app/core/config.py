"""
Configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with no configuration at all; override them via the
environment in any real deployment.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _split_csv(raw: str) -> List[str]:
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Business Directory API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Static allow-list of administrator e-mail addresses.  Only these
    # identities may open the moderation endpoints under ``/admin``.
    # Example: ADMIN_EMAILS="admin@example.com,ops@example.com".
    admin_emails: List[str] = field(
        default_factory=lambda: _split_csv(os.getenv("ADMIN_EMAILS", "admin@example.com"))
    )

    # Number of listings returned by the featured endpoint when the
    # caller does not ask for a specific amount.
    featured_limit: int = int(os.getenv("FEATURED_LIMIT", "4"))

    # Path to the SQLite database.  Relative paths are resolved against
    # the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "business_directory.db")

    def is_admin_email(self, email: str | None) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before this module is imported.
settings = Settings()
