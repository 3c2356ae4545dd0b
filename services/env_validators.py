"""Grammar checks used by the typed environment accessors."""

from __future__ import annotations

import ipaddress
import re
from typing import Iterable, Optional, Union
from urllib.parse import urlsplit

from email_validator import EmailNotValidError, validate_email

_NUMERIC_PATTERN = re.compile(r"^[+-]?([0-9]*[.])?[0-9]+$")
_LABEL_PATTERN = re.compile(r"^[a-z0-9\u00a1-\uffff-]+$", re.IGNORECASE)
_PUNYCODE_TLD_PATTERN = re.compile(r"^xn--[a-z0-9-]{2,}$", re.IGNORECASE)

TRUE_LITERALS = frozenset({"true", "1"})
FALSE_LITERALS = frozenset({"false", "0"})
DEFAULT_URL_PROTOCOLS = ("http", "https", "ftp")
MAX_URL_LENGTH = 2083


def is_numeric(value: str) -> bool:
    return bool(_NUMERIC_PATTERN.fullmatch(value))


def parse_number(value: str) -> Union[int, float]:
    """Convert a numeric literal to ``int`` when it has no fraction part, else ``float``."""

    if "." in value:
        return float(value)
    return int(value)


def is_boolean_literal(value: str) -> bool:
    normalized = value.lower()
    return normalized in TRUE_LITERALS or normalized in FALSE_LITERALS


def parse_boolean(value: str) -> bool:
    return value.lower() in TRUE_LITERALS


def is_ip(value: str, version: Optional[int] = None) -> bool:
    try:
        address = ipaddress.ip_address(value)
    except ValueError:
        return False
    return version is None or address.version == version


def is_fqdn(value: str, *, require_tld: bool = True) -> bool:
    host = value[:-1] if value.endswith(".") else value
    if not host or len(host) > 253:
        return False
    labels = host.split(".")
    if require_tld:
        if len(labels) < 2:
            return False
        tld = labels[-1]
        if not ((tld.isalpha() and len(tld) >= 2) or _PUNYCODE_TLD_PATTERN.fullmatch(tld)):
            return False
    for label in labels:
        if not label or len(label) > 63:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
        if not _LABEL_PATTERN.fullmatch(label):
            return False
    return True


def is_url(
    value: str,
    *,
    require_tld: bool = True,
    require_protocol: bool = True,
    protocols: Iterable[str] = DEFAULT_URL_PROTOCOLS,
) -> bool:
    """Check ``value`` against a pragmatic URL grammar.

    The scheme, when present, must be one of ``protocols``. Hosts may be IP
    literals or domain names; ``require_tld`` demands a dotted name ending in
    an alphabetic (or punycode) top-level domain.
    """

    if not value or len(value) > MAX_URL_LENGTH:
        return False
    if any(char.isspace() for char in value) or value.lower().startswith("mailto:"):
        return False

    candidate = value
    if "://" in candidate:
        scheme = candidate.split("://", 1)[0].lower()
        if scheme not in {protocol.lower() for protocol in protocols}:
            return False
    elif require_protocol or candidate.startswith("//"):
        return False
    else:
        candidate = f"//{candidate}"

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError:
        return False
    if port is not None and port == 0:
        return False

    host = parts.hostname
    if not host:
        return False
    if is_ip(host):
        return True
    return is_fqdn(host, require_tld=require_tld)


def is_email(value: str, *, require_tld: bool = True) -> bool:
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=require_tld)
    except EmailNotValidError:
        return False
    return True


__all__ = [
    "DEFAULT_URL_PROTOCOLS",
    "FALSE_LITERALS",
    "TRUE_LITERALS",
    "is_boolean_literal",
    "is_email",
    "is_fqdn",
    "is_ip",
    "is_numeric",
    "is_url",
    "parse_boolean",
    "parse_number",
]
