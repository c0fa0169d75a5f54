from __future__ import annotations

from typing import Iterable
from urllib.parse import urlparse


ALLOWED_SCHEMES: tuple[str, ...] = ("https", "http")


def _canonical_host(host: str) -> str:
    return str(host or "").strip().lower().rstrip(".")


def host_matches(host: str, allowed_hosts: Iterable[str]) -> bool:
    """True if ``host`` is one of ``allowed_hosts`` or a subdomain of one."""
    candidate = _canonical_host(host)
    for entry in allowed_hosts:
        root = _canonical_host(entry)
        if root and (candidate == root or candidate.endswith("." + root)):
            return True
    return False


def validate_endpoint_url(url: str | None, allowed_hosts: Iterable[str] | None = None) -> str:
    """Return the stripped ``url`` or raise ``ValueError`` if it cannot be fetched.

    ``allowed_hosts`` restricts the host (subdomains included) when given.
    """
    text = str(url or "").strip()
    if not text:
        raise ValueError("Endpoint URL is not set.")
    try:
        parsed = urlparse(text)
        host = parsed.hostname or ""
    except ValueError as exc:
        raise ValueError(f"Endpoint URL cannot be parsed: {text}") from exc
    scheme = (parsed.scheme or "").lower()
    if scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Unsupported URL scheme for endpoint: {text}")
    if not _canonical_host(host):
        raise ValueError(f"Endpoint URL has no host: {text}")
    try:
        host.encode("idna")
    except UnicodeError as exc:
        raise ValueError(f"Endpoint host is not a valid hostname: {host}") from exc
    if allowed_hosts is not None and not host_matches(host, allowed_hosts):
        raise ValueError(f"Untrusted endpoint host: {host}")
    return text
