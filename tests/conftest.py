import pytest
from fastapi.testclient import TestClient

from notes_portal.core.config import get_settings
from notes_portal.main import create_app


@pytest.fixture
def test_client(monkeypatch):
    """
    Crée un TestClient branché sur les services en mémoire (KV, bucket, auth),
    isolé pour chaque test.
    """
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("APP_NAME", "Notes Portal API (tests)")
    monkeypatch.setenv("BACKEND", "memory")
    monkeypatch.setenv("MAX_UPLOAD_MB", "1")  # limite faible pour tests
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost")
    monkeypatch.setenv("ADMIN_EMAIL", "admin@example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret-pass")

    # IMPORTANT: vider le cache des settings pour prendre en compte les env
    get_settings.cache_clear()

    app = create_app()
    client = TestClient(app)
    yield client
    get_settings.cache_clear()


@pytest.fixture
def backends(test_client):
    return test_client.app.state.backends


@pytest.fixture
def auth_headers(test_client):
    r = test_client.post("/admin/signup")
    assert r.status_code == 200, r.text
    r = test_client.post(
        "/auth/login",
        json={"email": "admin@example.com", "password": "s3cret-pass"},
    )
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
