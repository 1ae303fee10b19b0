"""Helpers for turning operator-entered address strings into sender identities.

Configuration values such as ``SMTP_FROM`` accept either a bare address
(``"john.doe@example.com"``) or a display form
(``"John Doe <john.doe@example.com>"``). :func:`parse_address` splits those
strings into a :class:`ParsedAddress`, validating the address portion with
:func:`is_email` and cleaning the display name with
:func:`sanitize_text_field`. None of the helpers raise; invalid input simply
yields empty fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from email.utils import formataddr

from markupsafe import Markup

_DISPLAY_FORM_RE = re.compile(r"(.*)<(.+)>")
_LOCAL_PART_RE = re.compile(r"[a-zA-Z0-9!#$%&'*+/=?^_`{|}~.-]+")
_DOMAIN_LABEL_RE = re.compile(r"[a-zA-Z0-9-]+")
_PERCENT_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")
_EMAIL_DISALLOWED_RE = re.compile(r"[^a-zA-Z0-9!#$%&'*+/=?^_`{|}~.@-]")

# Characters trimmed from domain ends before the label checks.
_DOMAIN_TRIM = " \t\n\r\0\x0b."
_LABEL_TRIM = " \t\n\r\0\x0b-"


@dataclass(frozen=True, slots=True)
class ParsedAddress:
    """Structured sender or reply-to identity.

    Attributes:
        email: Validated address, or ``""`` when absent or invalid.
        name: Sanitized display name, or ``""`` when none was supplied.
    """

    email: str = ""
    name: str = ""

    def formatted(self) -> str:
        """Return the identity as a header value such as ``Name <email>``.

        Returns:
            str: ``""`` when :attr:`email` is empty, the bare address when no
            name is present, otherwise the RFC 5322 display form produced by
            :func:`email.utils.formataddr`.
        """

        if not self.email:
            return ""
        return formataddr((self.name, self.email))


def is_email(candidate: object) -> bool:
    """Return whether ``candidate`` is a syntactically usable email address.

    The checks are deliberately practical rather than a full RFC 5322
    grammar: a minimum length of six characters, a single ``@`` splitting a
    non-empty local part from the domain, a restricted local-part alphabet,
    and a domain made of at least two alphanumeric/hyphen labels.

    Args:
        candidate: Value to inspect. Non-strings are never valid.

    Returns:
        bool: ``True`` when every check passes.
    """

    if not isinstance(candidate, str) or len(candidate) < 6:
        return False
    if "@" not in candidate[1:]:
        return False

    local, domain = candidate.split("@", 1)
    if not _LOCAL_PART_RE.fullmatch(local):
        return False
    if ".." in domain:
        return False
    if domain.strip(_DOMAIN_TRIM) != domain:
        return False

    labels = domain.split(".")
    if len(labels) < 2:
        return False
    for label in labels:
        if label.strip(_LABEL_TRIM) != label:
            return False
        if not _DOMAIN_LABEL_RE.fullmatch(label):
            return False
    return True


def sanitize_text_field(value: object) -> str:
    """Return ``value`` cleaned for use as a single-line display label.

    Markup is stripped (entities are unescaped by
    :meth:`markupsafe.Markup.striptags`), percent-encoded octets and control
    characters are removed, and whitespace runs collapse to one space.

    Args:
        value: Free text supplied by an operator.

    Returns:
        str: Sanitized text, or ``""`` for non-strings and text that cannot be
        encoded as UTF-8.
    """

    if not isinstance(value, str):
        return ""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return ""

    text = value
    if "<" in text:
        text = Markup(text).striptags()

    while True:
        stripped = _PERCENT_OCTET_RE.sub("", text)
        if stripped == text:
            break
        text = stripped

    text = _CONTROL_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_email(value: object) -> str:
    """Strip characters that can never appear in an address.

    Args:
        value: Address typed into a form field.

    Returns:
        str: Trimmed address with disallowed characters removed. The result
        still needs :func:`is_email` before use.
    """

    if not isinstance(value, str):
        return ""
    return _EMAIL_DISALLOWED_RE.sub("", value.strip())


def parse_address(raw: object) -> ParsedAddress:
    """Split ``"Name <email>"`` or ``"email"`` into a :class:`ParsedAddress`.

    Args:
        raw: Configuration value. ``None``, non-strings and empty strings
            produce an empty result.

    Returns:
        ParsedAddress: ``email`` is populated only when the address passes
        :func:`is_email`. ``name`` is populated whenever text precedes the
        angle brackets, even if the address itself was rejected.
    """

    if not isinstance(raw, str) or raw == "":
        return ParsedAddress()

    raw = raw.strip()
    match = _DISPLAY_FORM_RE.fullmatch(raw)
    if match:
        name_candidate = match.group(1).strip()
        email_candidate = match.group(2).strip()
    else:
        name_candidate = ""
        email_candidate = raw

    email = email_candidate if is_email(email_candidate) else ""
    name = sanitize_text_field(name_candidate) if name_candidate else ""
    return ParsedAddress(email=email, name=name)


__all__ = [
    "ParsedAddress",
    "is_email",
    "parse_address",
    "sanitize_email",
    "sanitize_text_field",
]
