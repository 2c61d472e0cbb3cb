"""
Shared fixtures for the contact relay tests.

No test touches a real SMTP server: the transport is replaced by a spy that
records every attempt and can be scripted to fail per port.
"""

import pytest
from fastapi.testclient import TestClient

from app.core.config import MailTransportConfig
from app.core.rate_limit import reset_rate_limits
from app.core.exceptions import TransportError
from app.schemas.contact import ContactSubmission


class SpyTransport:
    """Records send/verify calls; ``failures`` maps port -> exception to raise."""

    def __init__(self, failures: dict[int, TransportError] | None = None):
        self.failures = failures or {}
        self.sent = []
        self.verified = []

    def send(self, candidate, config, message):
        self.sent.append((candidate, message))
        if candidate.port in self.failures:
            raise self.failures[candidate.port]

    def verify(self, candidate, config):
        self.verified.append(candidate)
        if candidate.port in self.failures:
            raise self.failures[candidate.port]


def make_config(**overrides) -> MailTransportConfig:
    values = dict(
        host="smtp.example.com",
        port=587,
        username="me@example.com",
        password="secret",
        recipient="inbox@example.com",
    )
    values.update(overrides)
    return MailTransportConfig(**values)


def make_payload(**overrides) -> ContactSubmission:
    values = dict(
        name="Al",
        email="a@b.co",
        subject="Hi there",
        message="This is a long enough message.",
    )
    values.update(overrides)
    return ContactSubmission(**values)


@pytest.fixture(autouse=True)
def _clear_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture()
def spy():
    return SpyTransport()


@pytest.fixture()
def mail_config():
    return make_config()


@pytest.fixture()
def client(spy, mail_config):
    """TestClient with the mail config and transport swapped for test doubles."""
    from app.main import app
    from app.api.deps import get_mail_config, get_mail_transport

    app.dependency_overrides[get_mail_config] = lambda: mail_config
    app.dependency_overrides[get_mail_transport] = lambda: spy
    yield TestClient(app)
    app.dependency_overrides.clear()
