# link_health/crawler/normalizer.py
"""
URL validation and canonicalisation.

Every URL that reaches the frontier passes through :func:`normalize`, so two
spellings of the same resource (``HTTP://Example.com:80/a#top`` and
``http://example.com/a``) collapse to one visited-set entry.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

__all__ = ("InvalidURLError", "normalize", "ALLOWED_SCHEMES")

ALLOWED_SCHEMES = ("http", "https")
_DEFAULT_PORTS = {"http": 80, "https": 443}


class InvalidURLError(ValueError):
    """Raised for URLs that cannot be crawled."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


def normalize(candidate: str, base: Optional[str] = None) -> str:
    """
    Resolve *candidate* against *base* and return its canonical absolute form.

    Scheme and host are lower-cased, default ports and userinfo are removed,
    an empty path becomes ``/`` and the fragment is dropped. The query string
    is kept verbatim since it usually denotes a distinct resource.
    """
    if not isinstance(candidate, str):
        raise InvalidURLError(str(candidate), "not a string")
    raw = candidate.strip()
    try:
        absolute = urljoin(base, raw) if base else raw
        parts = urlsplit(absolute)
        scheme = parts.scheme.lower()
        host = parts.hostname
        port = parts.port
    except ValueError as exc:
        raise InvalidURLError(raw, str(exc)) from exc

    if not scheme:
        raise InvalidURLError(raw, "missing scheme")
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidURLError(raw, f"unsupported scheme '{scheme}'")
    if not host:
        raise InvalidURLError(raw, "missing host")

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))
