"""Tests for POST /api/auth/verify."""

from tabledash.auth import extract_secret_key
from tabledash.config import get_settings
from tabledash.core.supabase_client import get_client_factory
from tabledash.main import app

from conftest import ANON_KEY, SECRET_KEY, VITE_ANON_KEY, FakeAPIError


def test_verify_success(client, fake_db):
    response = client.post("/api/auth/verify", json={"secretKey": SECRET_KEY})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Secret Key verified"}
    assert fake_db.keys == [SECRET_KEY]
    assert fake_db.calls_for("navigation") == [("select", "id", None), ("limit", 1)]


def test_verify_trims_key(client, fake_db):
    client.post("/api/auth/verify", json={"secretKey": f"  {SECRET_KEY}\n"})
    assert fake_db.keys == [SECRET_KEY]


def test_verify_empty_key(client, fake_db):
    for body in ({}, {"secretKey": ""}, {"secretKey": "   "}):
        response = client.post("/api/auth/verify", json=body)
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Secret Key cannot be empty"
    assert fake_db.keys == []


def test_verify_anonymous_key(client, fake_db):
    response = client.post("/api/auth/verify", json={"secretKey": ANON_KEY})
    assert response.status_code == 401
    assert fake_db.keys == []


def test_verify_browser_anonymous_key(client, fake_db):
    response = client.post("/api/auth/verify", json={"secretKey": VITE_ANON_KEY})
    assert response.status_code == 401
    assert fake_db.keys == []


def test_verify_rejected_by_database(client, fake_db):
    fake_db.errors["navigation"] = FakeAPIError("Invalid API key", code="401")
    response = client.post("/api/auth/verify", json={"secretKey": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid Supabase Secret Key"


def test_verify_missing_url(client, monkeypatch):
    monkeypatch.delenv("SUPABASE_URL")
    get_settings.cache_clear()
    app.dependency_overrides.pop(get_client_factory)

    response = client.post("/api/auth/verify", json={"secretKey": SECRET_KEY})
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"


def test_verify_only_accepts_post(client):
    response = client.get("/api/auth/verify")
    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


class TestExtractSecretKey:
    def test_dedicated_header_first(self):
        assert extract_secret_key("abc", "Bearer other") == "abc"

    def test_bearer_fallback(self):
        assert extract_secret_key(None, "Bearer abc") == "abc"
        assert extract_secret_key("  ", "Bearer abc") == "abc"

    def test_nothing_supplied(self):
        assert extract_secret_key(None, None) is None
        assert extract_secret_key(None, "Bearer ") is None
