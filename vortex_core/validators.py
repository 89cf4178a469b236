"""
Reputation Validator
====================
Pure validation of untrusted IP and URL input before any outbound call.

The URL checks are the service's SSRF defense: a URL that resolves to a
loopback, link-local or private IPv4 host is never forwarded to the scanner.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Optional, Tuple
from urllib.parse import urlsplit

MAX_IP_LENGTH = 45  # longest textual IPv6 form
MAX_URL_LENGTH = 2048

ALLOWED_URL_SCHEMES = ("http", "https")
LOCAL_HOSTNAMES = {"localhost", "::1"}

_IPV4_PATTERN = re.compile(r"([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})")
# Deliberately loose; does not reject every malformed IPv6 literal
_IPV6_PATTERN = re.compile(r"([0-9a-fA-F]{0,4}:){2,7}[0-9a-fA-F]{0,4}")

# Label separators browsers treat as "."
_DOT_EQUIVALENTS = ("\u3002", "\uff0e", "\uff61")

_IPV4_HOST_PART = re.compile(r"0[xX][0-9a-fA-F]*|0[0-7]*|[1-9][0-9]*")


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


VALID = ValidationResult(valid=True)


def _invalid(error: str) -> ValidationResult:
    return ValidationResult(valid=False, error=error)


def validate_ip(value: Any) -> ValidationResult:
    """
    Validate an IPv4 or IPv6 address.

    Args:
        value: Untrusted input, usually straight from a JSON body

    Returns:
        ValidationResult; surrounding whitespace is ignored
    """
    if not isinstance(value, str) or not value:
        return _invalid("Valid IP address is required")

    candidate = value.strip()
    if len(candidate) > MAX_IP_LENGTH:
        return _invalid("Invalid IP address format")

    match = _IPV4_PATTERN.fullmatch(candidate)
    if match:
        if all(0 <= int(octet) <= 255 for octet in match.groups()):
            return VALID
        return _invalid("Invalid IP address format")

    if _IPV6_PATTERN.fullmatch(candidate):
        return VALID

    return _invalid("Invalid IP address format")


def parse_ipv4_host(hostname: str) -> Optional[Tuple[int, int, int, int]]:
    """
    Interpret a URL hostname as an IPv4 address the way browsers do.

    Accepts dotted-quad as well as shortened, hex (``0x7f``) and octal
    (``0177``) parts, so ``0x7f.1`` and ``2130706433`` both map to
    127.0.0.1. Returns None when the hostname is not an IPv4 address.
    """
    parts = hostname.split(".")
    if parts and parts[-1] == "":
        parts.pop()
    if not parts or len(parts) > 4:
        return None

    numbers = []
    for part in parts:
        if not _IPV4_HOST_PART.fullmatch(part):
            return None
        if part[:2].lower() == "0x":
            numbers.append(int(part[2:] or "0", 16))
        elif len(part) > 1 and part.startswith("0"):
            numbers.append(int(part, 8))
        else:
            numbers.append(int(part))

    *leading, last = numbers
    if any(n > 255 for n in leading) or last >= 256 ** (5 - len(numbers)):
        return None

    address = last
    for index, number in enumerate(leading):
        address += number << (8 * (3 - index))
    return (
        (address >> 24) & 0xFF,
        (address >> 16) & 0xFF,
        (address >> 8) & 0xFF,
        address & 0xFF,
    )


def normalize_hostname(hostname: str) -> str:
    """
    Canonical form of a URL hostname for the address checks.

    Applies NFKC (fullwidth digits and dots become ASCII), lowercases and
    drops the trailing root dot, so ``１２７．０．０．１`` and ``localhost.``
    compare as ``127.0.0.1`` and ``localhost``.
    """
    hostname = unicodedata.normalize("NFKC", hostname)
    for dot in _DOT_EQUIVALENTS:
        hostname = hostname.replace(dot, ".")
    return hostname.lower().rstrip(".")


def is_private_ipv4(octets: Tuple[int, int, int, int]) -> bool:
    """10/8, 172.16/12, 192.168/16, 169.254/16 and 0/8."""
    a, b = octets[0], octets[1]
    return (
        a == 10
        or (a == 172 and 16 <= b <= 31)
        or (a == 192 and b == 168)
        or (a == 169 and b == 254)
        or a == 0
    )


def validate_url(value: Any) -> ValidationResult:
    """
    Validate a URL submitted for scanning.

    Args:
        value: Untrusted input

    Returns:
        ValidationResult with a client-safe error message
    """
    if not isinstance(value, str) or not value:
        return _invalid("Valid URL is required")

    if len(value) > MAX_URL_LENGTH:
        return _invalid("URL exceeds maximum length")

    try:
        parsed = urlsplit(value.strip())
        hostname = parsed.hostname
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return _invalid("Invalid URL format")

    if not parsed.scheme:
        return _invalid("Invalid URL format")
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        return _invalid("Only HTTP/HTTPS URLs are allowed")
    if not hostname:
        return _invalid("Invalid URL format")

    hostname = normalize_hostname(hostname)
    if not hostname:
        return _invalid("Invalid URL format")
    if hostname in LOCAL_HOSTNAMES:
        return _invalid("Local addresses are not allowed")

    octets = parse_ipv4_host(hostname)
    if octets is not None:
        if octets[0] == 127:
            return _invalid("Local addresses are not allowed")
        if is_private_ipv4(octets):
            return _invalid("Private network addresses are not allowed")

    return VALID
