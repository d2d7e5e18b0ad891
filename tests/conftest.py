# File: tests/conftest.py
import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from link_health.config import CrawlConfig
from link_health.crawler.models import FetchOutcome, LinkRecord


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


class CollectingReporter:
    """Reporter that keeps everything in memory."""

    def __init__(self) -> None:
        self.records: List[LinkRecord] = []
        self.errors: List[str] = []

    def report(self, record: LinkRecord) -> None:
        self.records.append(record)

    def report_error(self, message: str) -> None:
        self.errors.append(message)

    def by_url(self) -> Dict[str, LinkRecord]:
        return {r.url: r for r in self.records}


class FakeFetcher:
    """
    In-memory site: maps URL -> (status, html). Unknown URLs fail like a
    refused connection.
    """

    def __init__(self, pages: Dict[str, Tuple[int, str]], delays: Optional[Dict[str, float]] = None) -> None:
        self.pages = pages
        self.delays = delays or {}
        self.calls: List[str] = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, url: str) -> FetchOutcome:
        self.calls.append(url)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(url, 0))
        finally:
            self.active -= 1
        if url not in self.pages:
            return FetchOutcome(url=url, error="connection refused")
        status, body = self.pages[url]
        return FetchOutcome(url=url, status=status, body=body)


@pytest.fixture()
def reporter() -> CollectingReporter:
    return CollectingReporter()


@pytest.fixture()
def basic_config() -> CrawlConfig:
    """
    Return a basic valid CrawlConfig for crawler tests (no jitter).
    """
    return CrawlConfig(
        seed_url="http://a.test/",
        max_depth=1,
        parallelism=4,
        jitter=0,
        user_agent="TestAgent/1.0",
        timeout=2.0,
    )
