"""Per-message mail session handed to the transport configurator."""

from __future__ import annotations

from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid
from typing import List, Tuple

MAILER_LOCAL = "mail"
MAILER_SMTP = "smtp"


@dataclass
class MailSession:
    """Mutable delivery settings and envelope for one outgoing message.

    A fresh session starts on the local relay (``localhost:25`` without
    encryption or authentication). :func:`smtp_config.transport.configure_session`
    switches it to an external relay when ``SMTP_HOST`` is configured.

    Attributes:
        mailer: ``"mail"`` for the local relay or ``"smtp"`` for an external one.
        host: Relay hostname.
        port: Relay port.
        smtp_secure: ``""``, ``"ssl"`` (implicit TLS) or ``"tls"`` (STARTTLS).
        smtp_auth: Whether to log in before sending.
        username: Login name used when :attr:`smtp_auth` is set.
        password: Login password used when :attr:`smtp_auth` is set.
        timeout: Socket timeout in seconds.
        from_address: ``From`` header address.
        from_name: ``From`` header display name.
        sender: Envelope sender (``MAIL FROM``); falls back to
            :attr:`from_address` when empty.
        to: Recipient addresses.
        reply_to: ``(address, name)`` pairs for the ``Reply-To`` header.
        subject: Message subject.
        body: Plain-text body.
        error_info: Text of the last delivery failure, ``""`` otherwise.
    """

    mailer: str = MAILER_LOCAL
    host: str = "localhost"
    port: int = 25
    smtp_secure: str = ""
    smtp_auth: bool = False
    username: str = ""
    password: str = ""
    timeout: float = 30
    from_address: str = ""
    from_name: str = ""
    sender: str = ""
    to: List[str] = field(default_factory=list)
    reply_to: List[Tuple[str, str]] = field(default_factory=list)
    subject: str = ""
    body: str = ""
    error_info: str = ""

    @property
    def is_smtp(self) -> bool:
        return self.mailer == MAILER_SMTP

    @property
    def envelope_sender(self) -> str:
        return self.sender or self.from_address

    def use_smtp(self) -> None:
        """Route the message through an external SMTP relay."""

        self.mailer = MAILER_SMTP

    def add_address(self, address: str) -> None:
        self.to.append(address.strip())

    def add_reply_to(self, address: str, name: str = "") -> bool:
        """Append a ``Reply-To`` entry, ignoring duplicate addresses.

        Args:
            address: Reply address.
            name: Optional display name.

        Returns:
            bool: ``False`` when ``address`` was already present.
        """

        address = address.strip()
        if any(existing.lower() == address.lower() for existing, _ in self.reply_to):
            return False
        self.reply_to.append((address, name.strip()))
        return True

    def set_from(self, address: str, name: str = "", auto: bool = True) -> None:
        """Set the ``From`` identity.

        Args:
            address: Sender address.
            name: Sender display name.
            auto: When ``True`` the envelope sender is also set to
                ``address`` unless one was already chosen. Pass ``False`` to
                leave an envelope sender picked earlier in the pipeline alone.
        """

        self.from_address = address.strip()
        self.from_name = " ".join(name.split())
        if auto and not self.sender:
            self.sender = self.from_address

    def build_message(self) -> EmailMessage:
        """Return an :class:`email.message.EmailMessage` for this session."""

        message = EmailMessage()
        message["From"] = formataddr((self.from_name, self.from_address))
        message["To"] = ", ".join(self.to)
        if self.reply_to:
            message["Reply-To"] = ", ".join(
                formataddr((name, address)) for address, name in self.reply_to
            )
        message["Subject"] = self.subject
        message["Date"] = formatdate(localtime=True)
        _, _, domain = self.from_address.rpartition("@")
        message["Message-ID"] = make_msgid(
            domain=domain if "@" in self.from_address else None
        )
        message.set_content(self.body)
        return message


__all__ = ["MAILER_LOCAL", "MAILER_SMTP", "MailSession"]
