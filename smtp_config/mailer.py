"""Outbound email delivery for the SMTP Config application."""

from __future__ import annotations

import smtplib
from dataclasses import dataclass, field
from typing import List

from flask import current_app, g

from .address import is_email, sanitize_email
from .config import DEFAULT_SENDER, DEFAULT_SENDER_NAME, TransportConfig
from .session import MailSession
from .transport import configure_session, resolve_from_address, resolve_from_name

TEST_SUBJECT = "SMTP Test"
TEST_BODY = (
    "If you received this email it means you have configured SMTP correctly "
    "on your web application."
)


@dataclass
class TestEmailResult:
    """Outcome of :func:`send_test_email` shown to the operator."""

    __test__ = False

    error: bool
    title: str
    content: List[str] = field(default_factory=list)


def get_transport_config() -> TransportConfig:
    """Return the :class:`TransportConfig` stored by :func:`smtp_config.create_app`."""

    transport = current_app.config.get("SMTP_TRANSPORT")
    if transport is None:
        transport = TransportConfig.from_mapping(current_app.config)
        current_app.config["SMTP_TRANSPORT"] = transport
    return transport


def build_session(
    to: str, subject: str, body: str, transport: TransportConfig
) -> MailSession:
    """Assemble a :class:`MailSession` ready for delivery.

    Args:
        to: Recipient email address.
        subject: Message subject line.
        body: Plain-text message body.
        transport: Settings applied through :mod:`smtp_config.transport`.

    Returns:
        MailSession: Session carrying the default ``From`` identity (after the
        ``SMTP_FROM`` overrides) and the relay settings from ``transport``.

    External Dependencies:
        * Reads ``MAIL_DEFAULT_SENDER``, ``MAIL_DEFAULT_SENDER_NAME`` and
          ``MAIL_TIMEOUT`` from :data:`flask.current_app.config`.
    """

    config = current_app.config
    from_email = resolve_from_address(
        transport, config.get("MAIL_DEFAULT_SENDER") or DEFAULT_SENDER
    )
    from_name = resolve_from_name(
        transport, config.get("MAIL_DEFAULT_SENDER_NAME") or DEFAULT_SENDER_NAME
    )

    session = MailSession(timeout=float(config.get("MAIL_TIMEOUT", 30)))
    session.set_from(from_email, from_name, auto=False)
    session.add_address(to)
    session.subject = subject
    session.body = body

    configure_session(transport, session)
    return session


def deliver(session: MailSession) -> None:
    """Hand ``session`` to :mod:`smtplib`.

    Raises:
        smtplib.SMTPException: If the relay rejects the connection, login or
            message.
        OSError: If the relay cannot be reached.
    """

    message = session.build_message()
    if session.is_smtp and session.smtp_secure == "ssl":
        smtp_cls = smtplib.SMTP_SSL
    else:
        smtp_cls = smtplib.SMTP

    with smtp_cls(session.host, session.port, timeout=session.timeout) as smtp:
        if session.is_smtp:
            if session.smtp_secure == "tls":
                smtp.starttls()
            if session.smtp_auth:
                smtp.login(session.username, session.password)
        smtp.send_message(
            message, from_addr=session.envelope_sender, to_addrs=session.to
        )


def send_email(to: str, subject: str, body: str) -> bool:
    """Send a plain-text email through the configured transport.

    Args:
        to: Recipient email address.
        subject: Message subject line.
        body: Plain-text message body.

    Returns:
        bool: ``True`` when the relay accepted the message. On failure the
        error text is stored on the session's ``error_info`` (see
        :func:`last_error`) and ``False`` is returned.

    External Dependencies:
        * Builds the session with :func:`build_session` and stores it on
          :data:`flask.g` as ``mail_session``.
        * Delivers through :func:`deliver`.
    """

    session = build_session(to, subject, body, get_transport_config())
    g.mail_session = session
    try:
        deliver(session)
    except (smtplib.SMTPException, OSError) as exc:
        session.error_info = str(exc) or exc.__class__.__name__
        current_app.logger.warning(
            "Email to %s via %s:%s failed: %s",
            to,
            session.host,
            session.port,
            session.error_info,
        )
        return False

    current_app.logger.info(
        "Email sent to %s via %s:%s", to, session.host, session.port
    )
    return True


def last_error() -> str:
    """Return the failure text of the most recent send in this context."""

    session = g.get("mail_session")
    if session is None:
        return ""
    return session.error_info


def send_test_email(recipient_raw: str) -> TestEmailResult:
    """Validate ``recipient_raw`` and send the SMTP test message to it.

    Args:
        recipient_raw: Address typed by the operator.

    Returns:
        TestEmailResult: Success, or a failure whose ``content`` explains
        whether the address was missing, invalid, or rejected by the relay.
    """

    result = TestEmailResult(
        error=True,
        title="Test Email Failure",
        content=["There was an error while trying to send the test email."],
    )

    recipient = sanitize_email(recipient_raw)
    if is_email(recipient):
        if send_email(recipient, TEST_SUBJECT, TEST_BODY):
            return TestEmailResult(
                error=False,
                title="Test Email Success",
                content=["The test email was sent successfully."],
            )
        error = last_error()
        if error:
            result.content.append(error)
    elif recipient == "":
        result.content.append("Please enter a valid email address.")
    else:
        result.content.append(f"{recipient} is no valid email address.")

    return result


__all__ = [
    "TEST_BODY",
    "TEST_SUBJECT",
    "TestEmailResult",
    "build_session",
    "deliver",
    "get_transport_config",
    "last_error",
    "send_email",
    "send_test_email",
]
