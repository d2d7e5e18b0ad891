# link_health/crawler/fetcher.py
"""
Fetcher module: issues HTTP requests with per-host concurrency limits and jitter.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Dict, Optional
from urllib.parse import urlsplit

from aiohttp import ClientError, ClientSession

from link_health.config import CrawlConfig
from link_health.crawler.models import FetchOutcome

__all__ = ("Fetcher",)


class Fetcher:
    """Turns a URL into a :class:`FetchOutcome`; never raises for network problems."""

    def __init__(
        self,
        session: ClientSession,
        config: CrawlConfig,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.session = session
        self.config = config
        self._rng = rng or random.Random()
        self._host_slots: Dict[str, asyncio.Semaphore] = {}
        self.logger = logging.getLogger("LinkHealth")

    def _slot_for(self, url: str) -> asyncio.Semaphore:
        host = urlsplit(url).netloc
        slot = self._host_slots.get(host)
        if slot is None:
            slot = asyncio.Semaphore(self.config.parallelism)
            self._host_slots[host] = slot
        return slot

    async def _jitter(self) -> None:
        if self.config.jitter > 0:
            await asyncio.sleep(self._rng.uniform(0, self.config.jitter))

    async def fetch(self, url: str) -> FetchOutcome:
        """
        GET *url* after a random delay of up to ``config.jitter`` seconds.

        The body is decoded only for HTML responses, since only those can
        contain further links.
        """
        async with self._slot_for(url):
            await self._jitter()
            try:
                async with self.session.get(url, allow_redirects=True) as resp:
                    status = resp.status
                    final_url = str(resp.url)
                    ctype = resp.headers.get("Content-Type", "").lower()
                    body = ""
                    if "html" in ctype:
                        body = await resp.text()
            except asyncio.TimeoutError:
                return self._failure(url, f"timed out after {self.config.timeout:g}s")
            except (ClientError, UnicodeDecodeError, LookupError) as exc:
                return self._failure(url, str(exc))
        self.logger.debug("GET %s -> %d", url, status)
        return FetchOutcome(url=url, status=status, body=body, final_url=final_url)

    def _failure(self, url: str, reason: str) -> FetchOutcome:
        reason = reason or "Unknown"
        self.logger.debug("Failed %s: %s", url, reason)
        return FetchOutcome(url=url, error=reason)
