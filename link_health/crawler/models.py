# link_health/crawler/models.py
"""
Data models for the link_health crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """A normalized URL waiting to be fetched, with its hop count from the seed."""

    url: str
    depth: int


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Result of one fetch: HTTP status on success, a failure reason otherwise."""

    url: str
    status: Optional[int] = None
    error: Optional[str] = None
    body: str = field(default="", repr=False)
    final_url: Optional[str] = None

    @property
    def base_url(self) -> str:
        """URL the body was served from, after redirects."""
        return self.final_url or self.url

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True, slots=True)
class LinkRecord:
    """Externally visible verdict for a fetched URL."""

    url: str
    status: Optional[int]
    healthy: bool
