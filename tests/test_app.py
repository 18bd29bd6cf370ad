import os

from fastapi.testclient import TestClient

from business_directory_api.app.core.config import settings
from business_directory_api.app.main import app

from .conftest import API


def test_startup_creates_and_seeds_the_database(tmp_path, monkeypatch):
    path = tmp_path / "fresh.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    assert not os.path.exists(path)

    with TestClient(app) as client:
        assert os.path.exists(path)
        resp = client.get(f"{API}/categories/")
        assert resp.status_code == 200
        assert len(resp.json()) == 9
