"""
Security helpers for password hashing, session tokens and access control.

Tokens are compact JWTs signed with HMAC‑SHA256 using the application
secret.  Besides the subject (``sub``, the e‑mail) and expiry
(``exp``) every token carries the identity id (``uid``) and the id of a
server-side session row (``sid``).  Deleting that row on sign-out
invalidates the token even though it has not expired yet.

Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a random salt.

The FastAPI dependencies at the bottom of the module resolve the
current identity (``get_current_user``/``get_optional_user``) and gate
routes to administrators (``require_admin``, backed by the static
e-mail allow-list) or to a particular account type
(``require_user_type``).
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url text, restoring the stripped padding."""
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _sign(message: bytes) -> bytes:
    return hmac.new(settings.secret_key.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(claims: Dict[str, Any], expires_in: Optional[int] = None) -> str:
    """Create a signed token embedding ``claims``.

    Parameters
    ----------
    claims : dict
        Claims to embed, typically ``sub``, ``uid`` and ``sid``.
    expires_in : Optional[int]
        Lifetime in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.

    Returns
    -------
    str
        ``header.payload.signature``, each part base64url encoded.
    """
    payload = dict(claims)
    payload["exp"] = int(time.time()) + (expires_in or settings.access_token_expire_minutes * 60)
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(_sign(signing_input))}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a token's signature and expiry.

    Returns the payload on success and ``None`` for malformed, forged or
    expired tokens.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    try:
        actual_sig = _b64_url_decode(signature_b64)
        payload = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    expected_sig = _sign(f"{header_b64}.{payload_b64}".encode("utf-8"))
    if not hmac.compare_digest(expected_sig, actual_sig):
        return None
    if not isinstance(payload, dict) or payload.get("exp") is None:
        return None
    if int(payload["exp"]) < int(time.time()):
        return None
    return payload


def hash_password(password: str) -> str:
    """Hash a password as ``salthex$hashhex`` using PBKDF2‑HMAC‑SHA256."""
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check ``plain_password`` against a stored ``salthex$hashhex`` string."""
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except (AttributeError, ValueError):
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_identity(token: str) -> Dict[str, Any]:
    """Map a bearer token to the identity it belongs to.

    The session row named by ``sid`` must still exist and belong to the
    token's ``uid``; otherwise the user has signed out (or was removed)
    and the token is refused.
    """
    payload = decode_access_token(token)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    from business_directory_api.app.core.db import get_connection

    conn = get_connection()
    try:
        row = conn.execute(
            """
            SELECT u.id, u.email, u.user_type
            FROM sessions s JOIN users u ON u.id = s.user_id
            WHERE s.id = ? AND u.id = ?
            """,
            (payload.get("sid"), payload.get("uid")),
        ).fetchone()
    finally:
        conn.close()
    if not row:
        raise _unauthorized("Session has ended")
    return {
        "sub": row["email"],
        "user_id": row["id"],
        "email": row["email"],
        "user_type": row["user_type"],
        "session_id": payload.get("sid"),
        "is_admin": settings.is_admin_email(row["email"]),
    }


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Dependency returning the authenticated identity or raising 401."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return _resolve_identity(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Dict[str, Any]]:
    """Like ``get_current_user`` but anonymous requests yield ``None``.

    A token that is present but invalid is still an error: silently
    treating it as anonymous would hide expired sessions from clients.
    """
    if credentials is None:
        return None
    return _resolve_identity(credentials.credentials)


def require_admin(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Allow only identities on the ``ADMIN_EMAILS`` allow-list."""
    if not current_user.get("is_admin"):
        logger.info("Denied admin access to %s", current_user.get("email"))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return current_user


def require_user_type(*user_types: str) -> Callable[..., Dict[str, Any]]:
    """Dependency factory restricting a route to the given account types.

    Use as ``Depends(require_user_type("business"))``.
    """

    def _user_type_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("user_type") not in user_types:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _user_type_dependency
