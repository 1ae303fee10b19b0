"""Pytest fixtures and an SMTP stub for the SMTP Config tests."""

from __future__ import annotations

import re
import sys
from pathlib import Path

import pytest
from werkzeug.security import generate_password_hash

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from smtp_config import create_app  # noqa: E402
from smtp_config.config import Config  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "StrongPass!1234"


class DummySMTP:
    """Lightweight SMTP stub used to avoid external calls in tests."""

    instances: list = []
    fail_with: Exception | None = None

    def __init__(self, host: str = "", port: int = 0, **kwargs) -> None:  # noqa: D401 - Signature matches smtplib
        self.host = host
        self.port = port
        self.kwargs = kwargs
        self.starttls_called = False
        self.login_calls: list = []
        self.sent: list = []
        self.smtp_class = type(self).__name__
        DummySMTP.instances.append(self)

    def __enter__(self) -> "DummySMTP":
        if DummySMTP.fail_with is not None:
            raise DummySMTP.fail_with
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def starttls(self) -> None:
        self.starttls_called = True

    def login(self, *args) -> None:
        self.login_calls.append(args)

    def send_message(self, message, from_addr=None, to_addrs=None) -> None:
        self.sent.append((message, from_addr, to_addrs))


class DummySMTPSSL(DummySMTP):
    """Stand-in for :class:`smtplib.SMTP_SSL`."""


class TestConfig(Config):
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret-key"
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    SMTP_HOST = None
    SMTP_PORT = None
    SMTP_ENCRYPTION = None
    SMTP_USER = None
    SMTP_PASSWORD = None
    SMTP_FROM = None
    SMTP_REPLYTO = None
    MAIL_DEFAULT_SENDER = "noreply@app.example.com"
    MAIL_DEFAULT_SENDER_NAME = "Example App"
    ADMIN_EMAIL = ADMIN_EMAIL
    ADMIN_PASSWORD_HASH = generate_password_hash(ADMIN_PASSWORD)


@pytest.fixture
def smtp_stub(monkeypatch):
    """Replace :mod:`smtplib` connections with :class:`DummySMTP`."""

    DummySMTP.instances = []
    DummySMTP.fail_with = None
    monkeypatch.setattr("smtplib.SMTP", DummySMTP)
    monkeypatch.setattr("smtplib.SMTP_SSL", DummySMTPSSL)
    yield DummySMTP
    DummySMTP.fail_with = None


@pytest.fixture
def app(smtp_stub):
    application = create_app(TestConfig)
    yield application


@pytest.fixture
def client(app):
    return app.test_client()


def extract_csrf_token(html: str) -> str:
    match = re.search(r'name="csrf_token" value="([^"]+)"', html)
    return match.group(1) if match else ""


def login(client, email: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD):
    resp = client.get("/login")
    token = extract_csrf_token(resp.get_data(as_text=True))
    return client.post(
        "/login",
        data={"email": email, "password": password, "csrf_token": token},
        follow_redirects=False,
    )
