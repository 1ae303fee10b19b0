"""Route tests for the SMTP test page."""

from __future__ import annotations

import smtplib

from conftest import TestConfig, extract_csrf_token, login

from smtp_config import create_app
from smtp_config.admin import describe_transport
from smtp_config.config import TransportConfig


def test_smtp_page_requires_login(client):
    response = client.get("/admin/smtp")
    assert response.status_code == 302
    assert "/login" in response.headers["Location"]


def test_index_redirects_to_smtp_page(client):
    response = client.get("/")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/admin/smtp")


def test_smtp_page_renders_configuration(app, client):
    app.config["SMTP_TRANSPORT"] = TransportConfig(
        host="mail.example.com",
        port=465,
        encryption="SSL",
        user="u",
        password="topsecret",
        from_address="John Doe <john@example.com>",
    )
    login(client)

    response = client.get("/admin/smtp")

    assert response.status_code == 200
    html = response.get_data(as_text=True)
    assert "Send a Test Email" in html
    assert "mail.example.com" in html
    assert "topsecret" not in html
    assert "John Doe &lt;john@example.com&gt;" in html
    assert "SMTP_REPLYTO=" in html


def test_send_test_email_success(client, smtp_stub):
    login(client)

    response = client.post(
        "/admin/smtp", data={"smtp_recipient": "to@example.org", "smtp_submit": "Send"}
    )

    html = response.get_data(as_text=True)
    assert response.status_code == 200
    assert "Test Email Success" in html
    assert "The test email was sent successfully." in html
    assert len(smtp_stub.instances) == 1


def test_send_test_email_invalid_recipient_is_escaped(client, smtp_stub):
    login(client)

    response = client.post(
        "/admin/smtp", data={"smtp_recipient": "<script>x", "smtp_submit": "Send"}
    )

    html = response.get_data(as_text=True)
    assert "Test Email Failure" in html
    assert "scriptx is no valid email address." in html
    assert "<script>x" not in html
    assert smtp_stub.instances == []


def test_send_test_email_empty_recipient(client, smtp_stub):
    login(client)

    response = client.post("/admin/smtp", data={"smtp_recipient": "", "smtp_submit": "Send"})

    html = response.get_data(as_text=True)
    assert "Please enter a valid email address." in html


def test_send_test_email_shows_transport_error(client, smtp_stub):
    smtp_stub.fail_with = smtplib.SMTPServerDisconnected("Connection unexpectedly closed")
    login(client)

    response = client.post(
        "/admin/smtp", data={"smtp_recipient": "to@example.org", "smtp_submit": "Send"}
    )

    html = response.get_data(as_text=True)
    assert "Test Email Failure" in html
    assert "There was an error while trying to send the test email." in html
    assert "Connection unexpectedly closed" in html


def test_send_test_email_requires_csrf(smtp_stub):
    class CSRFConfig(TestConfig):
        WTF_CSRF_ENABLED = True

    app = create_app(CSRFConfig)
    client = app.test_client()
    login(client)

    response = client.post("/admin/smtp", data={"smtp_recipient": "to@example.org"})
    assert response.status_code == 400
    assert smtp_stub.instances == []

    page = client.get("/admin/smtp")
    token = extract_csrf_token(page.get_data(as_text=True))
    response = client.post(
        "/admin/smtp",
        data={"smtp_recipient": "to@example.org", "csrf_token": token},
    )
    assert response.status_code == 200
    assert "Test Email Success" in response.get_data(as_text=True)


def test_send_test_email_rate_limited(smtp_stub):
    class LimitedConfig(TestConfig):
        RATELIMIT_ENABLED = True
        TEST_EMAIL_RATE_LIMIT = "1 per hour"

    app = create_app(LimitedConfig)
    client = app.test_client()
    login(client)

    first = client.post("/admin/smtp", data={"smtp_recipient": "to@example.org"})
    second = client.post("/admin/smtp", data={"smtp_recipient": "to@example.org"})

    assert first.status_code == 200
    assert second.status_code == 429


def test_describe_transport_defaults():
    rows = dict(describe_transport(TransportConfig()))
    assert rows["SMTP_HOST"] == "(not set, local relay)"
    assert rows["SMTP_ENCRYPTION"] == "none"
    assert rows["SMTP_PASSWORD"] == "(not set)"


def test_describe_transport_flags_invalid_identity():
    rows = dict(
        describe_transport(
            TransportConfig(from_address="John <broken>", reply_to="jane@example.com")
        )
    )
    assert rows["SMTP_FROM"] == "John <broken> (invalid address, ignored)"
    assert rows["SMTP_REPLYTO"] == "jane@example.com"
