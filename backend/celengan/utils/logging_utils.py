"""Helpers for keeping personal data out of request logs."""

import hashlib
from typing import Optional


def _short_hash(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()[:6]


def redact_email(email: Optional[str]) -> str:
    """
    Redact an email address while keeping it distinguishable in logs.

    Examples:
        >>> redact_email("budi@example.com")
        'b***@example.com'
        >>> redact_email("ab@example.com")
        'hash:...@example.com'
        >>> redact_email(None)
        'N/A'
    """
    if not email:
        return "N/A"

    if "@" not in email:
        return f"hash:{_short_hash(email)}"

    local, domain = email.split("@", 1)

    # Too short to show a prefix without revealing the whole local part
    if len(local) < 3:
        return f"hash:{_short_hash(email)}@{domain}"

    return f"{local[0]}***@{domain}"


def redact_ip(ip_address: Optional[str]) -> str:
    """
    Mask the host part of an IP address.

    Examples:
        >>> redact_ip("192.168.1.100")
        '192.168.1.***'
        >>> redact_ip(None)
        'N/A'
    """
    if not ip_address:
        return "N/A"

    parts = ip_address.split(".")
    if len(parts) == 4:
        return ".".join(parts[:3]) + ".***"

    parts = ip_address.split(":")
    if len(parts) >= 4:
        return ":".join(parts[:3]) + ":***"

    return f"hash:{_short_hash(ip_address)}"


def redact_username(username: Optional[str]) -> str:
    """Keep the first two characters of a username."""
    if not username:
        return "N/A"
    return username[:2] + "***"
