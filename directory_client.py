"""Business directory API client.

This module wraps the REST API served by ``business_directory_api`` for
use by front ends and scripts.  It owns the parts of the flow that run
on the caller's side of the wire:

* :meth:`DirectoryClient.register` – validate the registration form
  locally, create the account and, for business users, register the
  listing in a second request.
* :meth:`DirectoryClient.sign_in` / :meth:`DirectoryClient.sign_out` –
  manage the bearer token.
* :meth:`DirectoryClient.on_session_change` – subscribe to session
  events.  On every event the account type is resolved (fresh server
  data first, then the locally persisted value) and the profile of the
  signed-in user is fetched.

The account type is mirrored into a small JSON file (:class:`LocalStore`)
so that it is known before the server has been asked.  The server value
always wins and the file is cleared on sign-out.

All request helpers return ``(data, error)`` tuples.  ``error`` is
``None`` on success, otherwise a dictionary with ``status_code`` and
``message``.  Nothing is retried.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]
SessionCallback = Callable[[Optional[Dict[str, Any]]], None]

MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"
TERMS_MESSAGE = "Please agree to the terms and conditions"
MISSING_BUSINESS_MESSAGE = "Please fill in all business details"
BUSINESS_REGISTRATION_FAILED_MESSAGE = (
    "Your account was created, but there was an issue registering your business. "
    "Please contact support."
)

_REQUIRED_FIELDS = ("name", "email", "phone", "password")
_REQUIRED_BUSINESS_FIELDS = ("business_name", "category", "address", "city", "state", "pincode")


class LocalStore:
    """Tiny persistent key/value store backed by a JSON file."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or os.getenv("DIRECTORY_STATE_PATH", ".directory_state.json")

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, Any]) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


def validate_registration(form: Dict[str, Any]) -> Optional[str]:
    """Return the first problem with a registration form, or ``None``.

    Checks run in the order the form presents them: required personal
    fields, password confirmation, terms, then (for business accounts)
    the listing details.
    """
    if any(not str(form.get(key) or "").strip() for key in _REQUIRED_FIELDS):
        return MISSING_FIELDS_MESSAGE
    if form.get("password") != form.get("confirm_password"):
        return PASSWORD_MISMATCH_MESSAGE
    if not form.get("accept_terms"):
        return TERMS_MESSAGE
    if form.get("user_type", "customer") == "business":
        if any(not str(form.get(key) or "").strip() for key in _REQUIRED_BUSINESS_FIELDS):
            return MISSING_BUSINESS_MESSAGE
    return None


class DirectoryClient:
    """Client for the business directory API."""

    USER_TYPE_KEY = "userType"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        store: Optional[LocalStore] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 15,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: API root including the version prefix, e.g.
                ``http://localhost:8000/api/v1``.  Defaults to
                ``DIRECTORY_API_URL``.
            store: Persistent store for the account type fallback.
            session: Optional requests session.
            timeout: Per-request timeout in seconds.
        """
        base_url = base_url or os.getenv("DIRECTORY_API_URL", "http://localhost:8000/api/v1")
        self.base_url = base_url.rstrip("/")
        self.store = store or LocalStore()
        self.session = session or requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None
        self.current_session: Optional[Dict[str, Any]] = None
        self.user_type: Optional[str] = None
        self.profile: Optional[Dict[str, Any]] = None
        self._listeners: List[SessionCallback] = []

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Returns:
            A tuple ``(data, error)``.  ``data`` holds the parsed JSON
            body on success (``None`` for empty bodies) and ``error``
            is ``None``.  On failure ``data`` is ``None`` and ``error``
            is a dictionary with ``status_code`` and ``message``.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    message = _error_message(exc.response.json())
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------
    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        """Subscribe to session events.

        ``callback`` receives the session dictionary (token, ``user``,
        resolved ``user_type`` and ``profile``) or ``None`` after
        sign-out.  Returns a function that removes the subscription.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _resolve_user_type(self, user: Dict[str, Any]) -> Optional[str]:
        server_type = user.get("user_type")
        if server_type:
            self.store.set(self.USER_TYPE_KEY, server_type)
            return server_type
        return self.store.get(self.USER_TYPE_KEY)

    def _fetch_profile(self) -> Optional[Dict[str, Any]]:
        data, error = self._request("GET", "/profiles/me")
        if error:
            logger.error("Error fetching profile: %s", error["message"])
            return None
        return data

    def _set_session(self, session: Optional[Dict[str, Any]]) -> None:
        if session is None:
            self.token = None
            self.current_session = None
            self.user_type = None
            self.profile = None
            self.store.remove(self.USER_TYPE_KEY)
        else:
            self.token = session.get("access_token") or self.token
            user = session.get("user") or {}
            self.user_type = self._resolve_user_type(user)
            self.profile = session.get("profile") or self._fetch_profile()
            self.current_session = {
                "access_token": self.token,
                "user": user,
                "user_type": self.user_type,
                "profile": self.profile,
                "is_admin": bool(session.get("is_admin", False)),
            }
        for callback in list(self._listeners):
            callback(self.current_session)

    def register(self, form: Dict[str, Any]) -> Result:
        """Create an account and, for business users, its listing.

        The form is validated locally first; an invalid form never
        reaches the network.  Account creation and listing creation are
        separate requests, so a failure in the second leaves the account
        in place.  In that case the session is still established and the
        error carries :data:`BUSINESS_REGISTRATION_FAILED_MESSAGE`; the
        listing can be submitted again with :meth:`create_business`.

        Returns:
            A tuple ``(result, error)`` where ``result`` contains the
            ``session`` and, for business users, the created ``business``.
        """
        problem = validate_registration(form)
        if problem:
            return None, {"status_code": None, "message": problem}

        user_type = form.get("user_type", "customer")
        payload = {
            "email": form["email"],
            "password": form["password"],
            "confirm_password": form["confirm_password"],
            "accept_terms": bool(form.get("accept_terms")),
            "user_type": user_type,
            "name": form["name"],
            "phone": form["phone"],
        }
        session, error = self._request("POST", "/auth/signup", json_body=payload)
        if error:
            return None, error
        self.token = session.get("access_token")
        self.store.set(self.USER_TYPE_KEY, user_type)

        result: Dict[str, Any] = {"session": session, "business": None}
        business_error: Optional[Dict[str, Any]] = None
        if user_type == "business":
            business, business_error = self.create_business({
                "name": form["business_name"],
                "category": form["category"],
                "description": form.get("description") or None,
                "address": form["address"],
                "city": form["city"],
                "state": form["state"],
                "pincode": form["pincode"],
            })
            if business_error:
                logger.error(
                    "Error creating business for identity %s: %s",
                    (session.get("user") or {}).get("id"),
                    business_error["message"],
                )
                business_error = {
                    "status_code": business_error["status_code"],
                    "message": BUSINESS_REGISTRATION_FAILED_MESSAGE,
                    "detail": business_error["message"],
                }
            result["business"] = business

        self._set_session(session)
        return result, business_error

    def sign_in(self, email: str, password: str) -> Result:
        session, error = self._request(
            "POST", "/auth/signin", json_body={"email": email, "password": password}
        )
        if error:
            return None, error
        self._set_session(session)
        return self.current_session, None

    def restore_session(self, token: str) -> Result:
        """Resume a session from a stored token via ``GET /auth/session``."""
        self.token = token
        info, error = self._request("GET", "/auth/session")
        if error:
            self.token = None
            return None, error
        info["access_token"] = token
        self._set_session(info)
        return self.current_session, None

    def sign_out(self) -> Result:
        """End the session on the server and forget it locally.

        Local state is cleared even when the server call fails.
        """
        error = None
        if self.token:
            _, error = self._request("POST", "/auth/signout")
        self._set_session(None)
        return None, error

    # ------------------------------------------------------------------
    # Public directory
    # ------------------------------------------------------------------
    def list_categories(self, category: Optional[str] = None) -> Result:
        return self._request("GET", "/categories/", params={"category": category})

    def search_businesses(
        self,
        *,
        search: Optional[str] = None,
        location: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: str = "rating",
    ) -> Result:
        params = {"search": search, "location": location, "category": category, "sort_by": sort_by}
        return self._request("GET", "/businesses/", params=params)

    def featured_businesses(self, limit: Optional[int] = None) -> Result:
        return self._request("GET", "/businesses/featured", params={"limit": limit})

    def get_business(self, business_id: Any) -> Result:
        return self._request("GET", f"/businesses/{business_id}")

    def get_business_products(self, business_id: Any) -> Result:
        return self._request("GET", f"/businesses/{business_id}/products")

    def get_business_reviews(self, business_id: Any) -> Result:
        return self._request("GET", f"/businesses/{business_id}/reviews")

    def create_review(self, business_id: Any, rating: int, comment: Optional[str] = None) -> Result:
        return self._request(
            "POST", f"/businesses/{business_id}/reviews",
            json_body={"rating": rating, "comment": comment},
        )

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------
    def create_business(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/businesses/", json_body=payload)

    def get_my_business(self) -> Result:
        return self._request("GET", "/businesses/me")

    def update_my_business(self, changes: Dict[str, Any]) -> Result:
        return self._request("PUT", "/businesses/me", json_body=changes)

    def get_dashboard(self) -> Result:
        return self._request("GET", "/businesses/me/dashboard")

    def list_my_products(self) -> Result:
        return self._request("GET", "/businesses/me/products/")

    def create_product(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/businesses/me/products/", json_body=payload)

    def set_product_availability(self, product_id: Any, is_available: bool) -> Result:
        return self._request(
            "PATCH", f"/businesses/me/products/{product_id}/availability",
            json_body={"is_available": is_available},
        )

    def delete_product(self, product_id: Any) -> Result:
        return self._request("DELETE", f"/businesses/me/products/{product_id}")

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------
    def admin_partitions(self) -> Result:
        return self._request("GET", "/admin/businesses/partitions")

    def set_business_status(self, business_id: Any, status: str) -> Result:
        return self._request(
            "PUT", f"/admin/businesses/{business_id}/status", json_body={"status": status}
        )


def _error_message(body: Any) -> str:
    """Pull a readable message out of an error body.

    FastAPI validation errors carry a list under ``detail``; the first
    entry's ``msg`` is used.
    """
    if not isinstance(body, dict):
        return str(body)
    detail = body.get("detail") or body.get("message")
    if isinstance(detail, list) and detail:
        first = detail[0]
        if isinstance(first, dict):
            return str(first.get("msg", first))
        return str(first)
    return str(detail) if detail else str(body)
