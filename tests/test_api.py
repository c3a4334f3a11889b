"""
Tests for the HTTP surface of the Portfolio backend
"""
import logging

import pytest
from fastapi.testclient import TestClient

from database import MongoStore
import main
from main import create_app
from notifications import SmtpNotifier
from tests.conftest import FakeDatabase, FakeSMTP, UnreachableSMTP


class TestContactEndpoint:

    def test_valid_submission_created(self, client, db, valid_payload):
        response = client.post(
            "/api/contact",
            json=valid_payload,
            headers={"User-Agent": "pytest-agent/1.0", "Referer": "https://portfolio.example.com/#contact"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Jo"
        assert data["email"] == "a@b.co"
        assert data["id"]
        assert data["createdAt"]
        stored = db["contactmessage"].documents[0]
        assert stored["meta"]["referer"] == "https://portfolio.example.com/#contact"
        assert stored["meta"]["userAgent"] == "pytest-agent/1.0"

    def test_missing_referer_stored_as_null(self, client, db, valid_payload):
        client.post("/api/contact", json=valid_payload)
        assert db["contactmessage"].documents[0]["meta"]["referer"] is None

    def test_validation_failure(self, client, db):
        response = client.post("/api/contact", json={"name": "J", "email": "bad", "message": "hi"})

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Validation failed"
        assert [e["field"] for e in data["errors"]] == ["name", "email", "message"]
        assert db.count() == 0

    @pytest.mark.parametrize("body", [
        {"name": 42, "email": "a@b.co", "message": "0123456789"},
        ["not", "an", "object"],
    ])
    def test_malformed_body_uses_validation_shape(self, client, body):
        response = client.post("/api/contact", json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"
        assert response.json()["errors"]

    def test_script_in_message_is_escaped_in_email(self, client):
        payload = {"name": "Eve", "email": "eve@example.com", "message": "<script>alert(1)</script>"}

        response = client.post("/api/contact", json=payload)

        assert response.status_code == 201
        raw = FakeSMTP.sessions[0].sent[0][2]
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in raw

    def test_notification_failure_still_created(self, settings, db, valid_payload):
        app = create_app(settings, store=MongoStore(db), notifier=SmtpNotifier(settings, smtp_factory=UnreachableSMTP))

        response = TestClient(app).post("/api/contact", json=valid_payload)

        assert response.status_code == 201
        assert response.json()["id"] == str(db["contactmessage"].documents[0]["_id"])

    def test_persistence_failure(self, settings, notifier, valid_payload):
        app = create_app(settings, store=MongoStore(FakeDatabase(fail=True)), notifier=notifier)

        response = TestClient(app).post("/api/contact", json=valid_payload)

        assert response.status_code == 500
        assert "error" in response.json()
        assert FakeSMTP.sessions == []


class TestAppRoutes:

    def test_root(self, client):
        assert client.get("/").json() == {"message": "Portfolio API is running"}

    def test_unknown_route(self, client):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"message": "Not Found - /api/nope"}

    def test_database_report(self, client, valid_payload):
        client.post("/api/contact", json=valid_payload)
        data = client.get("/test").json()
        assert data["backend"] == "✅ Running"
        assert data["database_name"] == "portfolio_test"
        assert data["collections"] == ["contactmessage"]

    def test_cors_allows_configured_origin(self, client):
        response = client.options(
            "/api/contact",
            headers={"Origin": "https://portfolio.example.com", "Access-Control-Request-Method": "POST"},
        )
        assert response.headers["access-control-allow-origin"] == "https://portfolio.example.com"


class ExplodingStore:
    def create_document(self, collection_name, data):
        raise RuntimeError("disk quota exceeded")

    def status(self):
        return {}


class TestServerErrorHandler:

    def test_unexpected_error_shows_detail_outside_production(self, settings, notifier, valid_payload):
        app = create_app(settings, store=ExplodingStore(), notifier=notifier)

        response = TestClient(app, raise_server_exceptions=False).post("/api/contact", json=valid_payload)

        assert response.status_code == 500
        assert response.json() == {"message": "Internal Server Error", "error": "disk quota exceeded"}
        assert FakeSMTP.sessions == []

    def test_unexpected_error_hides_detail_in_production(self, settings, notifier, valid_payload):
        settings.app_env = "production"
        app = create_app(settings, store=ExplodingStore(), notifier=notifier)

        response = TestClient(app, raise_server_exceptions=False).post("/api/contact", json=valid_payload)

        assert response.status_code == 500
        assert response.json() == {"message": "Internal Server Error"}


class TestRequestLogging:

    def test_requests_logged_outside_production(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="main"):
            client.get("/")

        assert "GET / 200" in caplog.text

    def test_requests_not_logged_in_production(self, settings, store, notifier, caplog):
        settings.app_env = "production"
        client = TestClient(create_app(settings, store=store, notifier=notifier))

        with caplog.at_level(logging.INFO, logger="main"):
            client.get("/")

        assert "GET / 200" not in caplog.text


class TestBuildApp:

    def test_import_has_no_global_app(self):
        assert not hasattr(main, "app")

    def test_builds_from_environment(self, monkeypatch):
        configured = []
        monkeypatch.setattr(main, "configure_logging", configured.append)
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.delenv("DATABASE_URL", raising=False)

        app = main.build_app()

        assert app.state.settings.is_production
        assert configured == [app.state.settings]
