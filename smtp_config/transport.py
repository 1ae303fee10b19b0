"""Apply ``SMTP_*`` settings to outgoing mail.

The functions here replace framework hooks with explicit calls.
:func:`smtp_config.mailer.send_email` passes its default ``From`` values
through :func:`resolve_from_address` and :func:`resolve_from_name`, then calls
:func:`configure_session` just before delivery. Each function only reads the
:class:`~smtp_config.config.TransportConfig` it is given and never raises.
"""

from __future__ import annotations

import logging

from .address import parse_address
from .config import TransportConfig, parse_port
from .session import MailSession

logger = logging.getLogger("smtp_config.transport")

SECURE_MODES = ("ssl", "tls")


def _non_empty_string(value: object) -> bool:
    return isinstance(value, str) and value != ""


def configure_session(config: TransportConfig, session: MailSession) -> None:
    """Route ``session`` through the configured relay and sender identity.

    Args:
        config: Transport snapshot built at application start.
        session: Session for the message about to be sent. Only fields named
            below are touched, and no reference is kept after the call.

    Returns:
        None. Relay settings are applied only when ``config.host`` is set.
        Port, encryption, credentials and ``Reply-To`` each depend solely on
        their own setting. The ``From`` identity from ``config.from_address``
        is applied whether or not a relay is configured, keeping the current
        display name when the setting carries only an address.
    """

    if _non_empty_string(config.host):
        session.use_smtp()
        session.host = config.host

        port = parse_port(config.port)
        if port:
            session.port = port

        if isinstance(config.encryption, str):
            encryption = config.encryption.lower()
            if encryption in SECURE_MODES:
                session.smtp_secure = encryption

        if _non_empty_string(config.user):
            session.smtp_auth = True
            session.username = config.user
            if isinstance(config.password, str):
                session.password = config.password

        if _non_empty_string(config.reply_to):
            reply = parse_address(config.reply_to)
            if reply.email:
                if reply.name:
                    session.add_reply_to(reply.email, reply.name)
                else:
                    session.add_reply_to(reply.email)
            else:
                logger.debug("SMTP_REPLYTO does not contain a valid address.")

    sender = parse_address(config.from_address)
    if sender.email:
        from_name = sender.name if sender.name else session.from_name
        session.set_from(sender.email, from_name, auto=False)


def resolve_from_address(config: TransportConfig, current_from: str) -> str:
    """Return the configured ``From`` address, or ``current_from``."""

    parts = parse_address(config.from_address)
    if parts.email:
        return parts.email
    return current_from


def resolve_from_name(config: TransportConfig, current_name: str) -> str:
    """Return the configured ``From`` display name, or ``current_name``.

    Only a name written in the ``"Name <email>"`` form overrides the default;
    a bare address in ``SMTP_FROM`` leaves ``current_name`` untouched.
    """

    parts = parse_address(config.from_address)
    if parts.name:
        return parts.name
    return current_name


__all__ = [
    "SECURE_MODES",
    "configure_session",
    "resolve_from_address",
    "resolve_from_name",
]
