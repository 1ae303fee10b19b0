"""Central configuration for the SMTP Config Flask application.

Key settings exposed by :class:`Config`:

* ``SMTP_*``: Outbound transport and envelope identity. Every key is
  optional; a missing ``SMTP_HOST`` leaves mail on the local relay.
* ``MAIL_DEFAULT_SENDER`` and ``MAIL_DEFAULT_SENDER_NAME``: The identity used
  when ``SMTP_FROM`` is unset or invalid.
* ``SECRET_KEY``: Secures Flask sessions and CSRF tokens. Generated at
  startup when the environment does not provide one.
* ``ADMIN_EMAIL`` and ``ADMIN_PASSWORD_HASH``: Credentials for the operator
  allowed to open the SMTP test page.
* ``RATELIMIT_*``, ``AUTH_LOGIN_RATE_LIMIT`` and ``TEST_EMAIL_RATE_LIMIT``:
  Throttles enforced by :mod:`flask_limiter`.

All values are read once from environment variables so deployments can
change behaviour without modifying code. :class:`TransportConfig` captures
the ``SMTP_*`` subset as an immutable snapshot handed to the transport
helpers in :mod:`smtp_config.transport`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from secrets import token_urlsafe
from typing import Any, Mapping, Optional

logger = logging.getLogger("smtp_config.config")

TRUE_VALUES = {"true", "1", "yes", "y", "on"}
DEFAULT_SENDER = "noreply@localhost.localdomain"
DEFAULT_SENDER_NAME = "SMTP Config"


def _resolve_secret_key() -> str:
    """Return a cryptographically strong secret key for Flask sessions."""

    configured = os.getenv("SECRET_KEY")
    if configured:
        return configured

    generated = token_urlsafe(32)
    logger.warning(
        "SECRET_KEY environment variable is not set; generated a one-time key."
    )
    return generated


def parse_port(value: Any, *, source: str = "SMTP_PORT") -> Optional[int]:
    """Coerce a configured port into an integer.

    Args:
        value: Raw value taken from the environment or ``app.config``.
        source: Setting name used in the warning emitted for bad values.

    Returns:
        Optional[int]: The port, or ``None`` when the value is empty, zero, or
        not numeric. Non-numeric values are logged and otherwise ignored so a
        typo never prevents the application from starting.
    """

    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        port = int(str(value).strip())
    except ValueError:
        logger.warning("Ignoring non-numeric %s value %r.", source, value)
        return None
    return port or None


def _resolve_bool(name: str, default: str) -> bool:
    """Return whether the environment variable ``name`` holds a truthy flag."""

    return os.getenv(name, default).strip().lower() in TRUE_VALUES


@dataclass(frozen=True, slots=True)
class TransportConfig:
    """Read-only snapshot of the ``SMTP_*`` settings.

    Each field is optional. ``None`` and ``""`` both mean "not configured";
    the helpers in :mod:`smtp_config.transport` decide how each absence
    degrades.
    """

    host: Optional[str] = None
    port: Optional[int] = None
    encryption: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    from_address: Optional[str] = None
    reply_to: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "TransportConfig":
        """Build a snapshot from ``SMTP_*`` keys in ``values``.

        Args:
            values: Typically ``app.config`` or :data:`os.environ`.

        Returns:
            TransportConfig: Snapshot with the port coerced through
            :func:`parse_port`.
        """

        return cls(
            host=values.get("SMTP_HOST"),
            port=parse_port(values.get("SMTP_PORT")),
            encryption=values.get("SMTP_ENCRYPTION"),
            user=values.get("SMTP_USER"),
            password=values.get("SMTP_PASSWORD"),
            from_address=values.get("SMTP_FROM"),
            reply_to=values.get("SMTP_REPLYTO"),
        )


class Config:
    SECRET_KEY = _resolve_secret_key()

    # Outbound transport. Missing keys keep the local relay defaults.
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = parse_port(os.getenv("SMTP_PORT"))
    SMTP_ENCRYPTION = os.getenv("SMTP_ENCRYPTION")
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM = os.getenv("SMTP_FROM")
    SMTP_REPLYTO = os.getenv("SMTP_REPLYTO")

    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", DEFAULT_SENDER)
    MAIL_DEFAULT_SENDER_NAME = os.getenv(
        "MAIL_DEFAULT_SENDER_NAME", DEFAULT_SENDER_NAME
    )
    MAIL_TIMEOUT = float(os.getenv("MAIL_TIMEOUT", 30))

    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "")
    ADMIN_PASSWORD_HASH = os.getenv("ADMIN_PASSWORD_HASH", "")

    WTF_CSRF_ENABLED = True
    RATELIMIT_ENABLED = _resolve_bool("RATELIMIT_ENABLED", "true")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = _resolve_bool("RATELIMIT_HEADERS_ENABLED", "true")
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    TEST_EMAIL_RATE_LIMIT = os.getenv("TEST_EMAIL_RATE_LIMIT", "10 per hour")
