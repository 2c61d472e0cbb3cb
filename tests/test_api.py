"""
Integration tests for the HTTP surface.

Requests go through the full FastAPI app via TestClient; the mail config and
transport dependencies are overridden so no SMTP traffic happens.
"""

import pytest
from unittest.mock import patch

from app.core.config import settings
from app.core.exceptions import TransportError, TransportTimeout

from conftest import SpyTransport, make_config


VALID_BODY = {
    "name": "Al",
    "email": "a@b.co",
    "subject": "Hi there",
    "message": "This is a long enough message.",
}


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert isinstance(data["timestamp"], int)


class TestContactInfo:
    def test_live_config(self, client):
        data = client.get("/api/contact").json()

        assert data["endpoint"] == "/api/contact"
        assert data["method"] == "POST"
        assert data["requiredFields"] == ["name", "email", "subject", "message"]
        assert data["optionalFields"] == ["company", "_honeypot"]
        assert data["dryRun"] is False
        assert "envPresence" not in data

    @pytest.mark.parametrize("mail_config", [make_config(password="")])
    def test_debug_adds_presence(self, client):
        data = client.get("/api/contact?debug=1").json()

        assert data["dryRun"] is True
        assert data["envPresence"]["SMTP_PASS"] is False
        assert data["envPresence"]["SMTP_HOST"] is True


class TestSubmitContact:
    def test_sends_message(self, client, spy):
        response = client.post("/api/contact", json=VALID_BODY)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Message sent successfully."}

        (candidate, message), = spy.sent
        assert candidate.port == 587
        assert message["To"] == "inbox@example.com"
        assert message["Reply-To"] == "a@b.co"
        assert message["Subject"] == "[Portfolio] Hi there"

    @pytest.mark.parametrize("mail_config", [make_config(password="")])
    def test_dry_run_without_password(self, client, spy):
        response = client.post("/api/contact", json=VALID_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["dryRun"] is True
        assert "envPresence" not in data
        assert spy.sent == []

    @pytest.mark.parametrize("mail_config", [make_config(host="")])
    def test_dry_run_debug_presence(self, client, spy):
        data = client.post("/api/contact?debug=1", json=VALID_BODY).json()

        assert data["envPresence"] == {
            "SMTP_HOST": False,
            "SMTP_USER": True,
            "SMTP_PASS": True,
            "CONTACT_TO": True,
        }

    def test_debug_setting_adds_presence(self, client):
        from app.main import app
        from app.api.deps import get_mail_config

        app.dependency_overrides[get_mail_config] = lambda: make_config(password="")
        with patch.object(settings, "CONTACT_DEBUG", True):
            data = client.post("/api/contact", json=VALID_BODY).json()

        assert data["envPresence"]["SMTP_PASS"] is False

    def test_honeypot_accepts_without_sending(self, client, spy):
        body = dict(VALID_BODY, _honeypot="gotcha", name="")
        response = client.post("/api/contact", json=body)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Thank you."}
        assert spy.sent == []

    def test_plain_honeypot_key_is_ignored(self, client, spy):
        """Only the underscored field is the bot trap; other keys are unknown fields."""
        response = client.post("/api/contact", json=dict(VALID_BODY, honeypot="x"))

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Message sent successfully."}
        assert len(spy.sent) == 1

    @pytest.mark.parametrize(
        "field, value, error",
        [
            ("name", "A", "Name is required."),
            ("email", "not-an-email", "Valid email required."),
            ("subject", "Hi", "Subject too short."),
            ("message", "123456789", "Message must be at least 10 characters."),
        ],
    )
    def test_validation_errors(self, client, spy, field, value, error):
        response = client.post("/api/contact", json=dict(VALID_BODY, **{field: value}))

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": error}
        assert spy.sent == []

    def test_missing_fields(self, client):
        response = client.post("/api/contact", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Name is required."

    def test_malformed_body(self, client):
        response = client.post(
            "/api/contact",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid request body."}

    def test_non_string_field(self, client):
        response = client.post("/api/contact", json=dict(VALID_BODY, name=["x"]))
        assert response.status_code == 400

    def test_fallback_success(self, client, spy):
        spy.failures[587] = TransportTimeout("587 timed out")

        response = client.post("/api/contact", json=VALID_BODY)

        assert response.status_code == 200
        assert [c.port for c, _ in spy.sent] == [587, 465]

    def test_timeout_maps_to_504(self, client, spy):
        spy.failures[587] = TransportTimeout("587 timed out")
        spy.failures[465] = TransportError("465 refused")

        response = client.post("/api/contact", json=VALID_BODY)

        assert response.status_code == 504
        data = response.json()
        assert data["success"] is False
        assert "timeout" in data["error"].lower()

    def test_other_failure_maps_to_500(self, client, spy):
        spy.failures[587] = TransportError("auth rejected for me@example.com", code="EAUTH")

        response = client.post("/api/contact", json=VALID_BODY)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Internal server error. Please try again later.",
        }
        assert len(spy.sent) == 1

    def test_rate_limit(self, client, spy):
        for _ in range(10):
            assert client.post("/api/contact", json=VALID_BODY).status_code == 200

        response = client.post("/api/contact", json=VALID_BODY)

        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "error": "Too many messages from this IP. Please try again later.",
        }
        assert len(spy.sent) == 10

    def test_rate_limit_does_not_cover_get(self, client):
        for _ in range(12):
            assert client.get("/api/contact").status_code == 200


class TestVerify:
    def test_disabled_by_default(self, client):
        assert client.get("/api/contact/verify").status_code == 404

    def test_success(self, client, spy):
        with patch.object(settings, "CONTACT_VERIFY_ENABLED", True):
            response = client.get("/api/contact/verify")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["portTried"] == 587
        assert isinstance(data["elapsedMs"], int)
        assert spy.sent == []
        assert len(spy.verified) == 1

    @pytest.mark.parametrize("mail_config", [make_config(username="", recipient="x@y.io")])
    def test_missing_env(self, client, spy):
        with patch.object(settings, "CONTACT_VERIFY_ENABLED", True):
            response = client.get("/api/contact/verify")

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Missing SMTP env vars."}
        assert spy.verified == []

    def test_failure(self, client, spy):
        spy.failures[587] = TransportTimeout("Could not connect", code="ETIMEDOUT")

        with patch.object(settings, "CONTACT_VERIFY_ENABLED", True):
            response = client.get("/api/contact/verify")

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Could not connect"
        assert data["code"] == "ETIMEDOUT"
        assert "elapsedMs" in data
        assert len(spy.verified) == 1
