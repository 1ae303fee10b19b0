"""Administrative page for checking the outbound mail configuration.

The page lets the signed-in operator send a test message through the
configured transport, shows the effective ``SMTP_*`` settings, and offers a
copy-ready snippet listing every supported environment variable.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from flask import Blueprint, current_app, render_template
from flask_login import login_required
from flask_wtf import FlaskForm
from wtforms import StringField

from . import limiter
from .address import parse_address
from .config import TransportConfig
from .mailer import TestEmailResult, get_transport_config, send_test_email

admin_bp = Blueprint("admin", __name__)

CONFIG_SNIPPET = """# SMTP server settings
SMTP_HOST=mail.example.com
SMTP_PORT=465                                # optional - default: 25
SMTP_ENCRYPTION=ssl                          # optional ('tls' or 'ssl') - default: no encryption
SMTP_USER=username                           # optional - default: no user
SMTP_PASSWORD=password                       # optional - default: no password
SMTP_FROM="John Doe <john.doe@example.com>"  # optional - default: MAIL_DEFAULT_SENDER
SMTP_REPLYTO="Jane Doe <jane.doe@example.com>"  # optional - default: no reply-to address"""

NOT_SET = "(not set)"


class TestEmailForm(FlaskForm):
    smtp_recipient = StringField("Recipient")


def describe_transport(config: TransportConfig) -> List[Tuple[str, str]]:
    """Return ``(setting, value)`` rows describing the active configuration.

    Args:
        config: Snapshot returned by :func:`smtp_config.mailer.get_transport_config`.

    Returns:
        List[Tuple[str, str]]: Display rows in environment-variable order. The
        password is masked, and ``SMTP_FROM``/``SMTP_REPLYTO`` show the parsed
        identity, or a rejection notice when the address failed validation.
    """

    def _identity(raw: Optional[str]) -> str:
        if not raw:
            return NOT_SET
        parsed = parse_address(raw)
        if not parsed.email:
            return f"{raw} (invalid address, ignored)"
        return parsed.formatted()

    encryption = (config.encryption or "").lower()
    return [
        ("SMTP_HOST", config.host or "(not set, local relay)"),
        ("SMTP_PORT", str(config.port) if config.port else NOT_SET),
        (
            "SMTP_ENCRYPTION",
            encryption if encryption in ("ssl", "tls") else "none",
        ),
        ("SMTP_USER", config.user or NOT_SET),
        ("SMTP_PASSWORD", "********" if config.password else NOT_SET),
        ("SMTP_FROM", _identity(config.from_address)),
        ("SMTP_REPLYTO", _identity(config.reply_to)),
    ]


def _test_email_rate_limit_value() -> str:
    value = current_app.config.get("TEST_EMAIL_RATE_LIMIT", "10 per hour")
    return str(value or "10 per hour")


@admin_bp.route("/smtp", methods=["GET", "POST"])
@limiter.limit(_test_email_rate_limit_value, methods=["POST"])
@login_required
def smtp_settings() -> str:
    """Render the SMTP page and handle test-email submissions.

    Form fields:
        - smtp_recipient

    Returns:
        Renders ``admin/smtp.html`` with the :class:`TestEmailResult` of the
        submission, if any.
    """
    form = TestEmailForm()
    result: Optional[TestEmailResult] = None
    if form.validate_on_submit():
        result = send_test_email(form.smtp_recipient.data or "")
        if result.error:
            current_app.logger.warning(
                "SMTP test email failed: %s", " ".join(result.content)
            )

    return render_template(
        "admin/smtp.html",
        form=form,
        result=result,
        settings=describe_transport(get_transport_config()),
        snippet=CONFIG_SNIPPET,
    )
