import itertools

import pytest
from fastapi.testclient import TestClient

from business_directory_api.app.core.config import settings
from business_directory_api.app.core.db import init_db
from business_directory_api.app.main import app

API = "/api/v1"
ADMIN_EMAIL = "admin@example.com"


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "directory.db"))
    monkeypatch.setattr(settings, "admin_emails", [ADMIN_EMAIL])
    init_db()
    return TestClient(app)


@pytest.fixture
def sign_up(client):
    """Register an identity and return its auth headers."""

    def _sign_up(email, user_type="customer", password="secret123", name="Test User"):
        resp = client.post(
            f"{API}/auth/signup",
            json={
                "email": email,
                "password": password,
                "confirm_password": password,
                "accept_terms": True,
                "user_type": user_type,
                "name": name,
                "phone": "9999999999",
            },
        )
        assert resp.status_code == 201, resp.text
        return auth(resp.json()["access_token"])

    return _sign_up


@pytest.fixture
def admin_headers(sign_up):
    return sign_up(ADMIN_EMAIL)


@pytest.fixture
def register_business(client, sign_up):
    """Create a business identity plus its (pending) listing.

    Returns ``(owner_headers, business_json)``.
    """
    counter = itertools.count(1)

    def _register(name, city="Pune", state="Maharashtra", pincode="411001", category="grocery", **extra):
        headers = sign_up(f"owner{next(counter)}@example.com", user_type="business")
        payload = {"name": name, "city": city, "state": state, "pincode": pincode, "category": category}
        payload.update(extra)
        resp = client.post(f"{API}/businesses/", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return headers, resp.json()

    return _register


@pytest.fixture
def set_status(client, admin_headers):
    def _set_status(business_id, status="approved"):
        resp = client.put(
            f"{API}/admin/businesses/{business_id}/status",
            json={"status": status},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _set_status
