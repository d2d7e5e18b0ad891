# === FILE: link_health/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Protocol

from aiohttp import ClientSession, ClientTimeout

from link_health.aggregator import CrawlSummary
from link_health.config import CrawlConfig
from link_health.crawler.fetcher import Fetcher
from link_health.crawler.frontier import Frontier
from link_health.crawler.health import to_record
from link_health.crawler.link_extractor import extract_links
from link_health.crawler.models import CrawlTarget, FetchOutcome
from link_health.crawler.normalizer import InvalidURLError, normalize
from link_health.report import Reporter

__all__ = ("LinkHealthCrawler", "SupportsFetch")


class SupportsFetch(Protocol):
    async def fetch(self, url: str) -> FetchOutcome: ...


class LinkHealthCrawler:
    """Асинхронный обход сайта с проверкой каждой найденной ссылки."""

    def __init__(
        self,
        config: CrawlConfig,
        reporter: Reporter,
        fetcher: Optional[SupportsFetch] = None,
        frontier: Optional[Frontier] = None,
    ) -> None:
        self.config = config
        self.reporter = reporter
        self.fetcher = fetcher
        self.frontier = frontier or Frontier(config.max_depth)
        self.summary = CrawlSummary(seed_url=config.seed_url)
        self.session: Optional[ClientSession] = None
        self.logger = logging.getLogger("LinkHealth")
        self._workers: List[asyncio.Task[None]] = []

    async def __aenter__(self) -> LinkHealthCrawler:
        if self.fetcher is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
            self.fetcher = Fetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self) -> CrawlSummary:
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized, use 'async with'")
        self.logger.info("Старт обхода: %s (глубина %d, потоков %d)",
                         self.config.seed_url, self.config.max_depth, self.config.parallelism)
        start = time.monotonic()
        self.frontier.enqueue(CrawlTarget(self.config.seed_url, 0))
        self._workers = [
            asyncio.create_task(self._worker(), name=f"link-health-worker-{i}")
            for i in range(self.config.parallelism)
        ]
        try:
            _, pending = await asyncio.wait(self._workers, timeout=self.config.crawl_timeout)
            if pending:
                self.logger.warning("Обход не завершён за %s с, останавливаемся", self.config.crawl_timeout)
                await self.shutdown(grace=self.config.timeout)
        finally:
            await self._cancel_workers()
        self.summary.duration = time.monotonic() - start
        self.summary.stopped = self.frontier.closed
        duration = self.summary.duration
        self.logger.info(
            "Завершено: %d ссылок за %.2f с (%.2f стр/с), рабочих %d, нерабочих %d",
            self.summary.total, duration, self.summary.total / duration if duration else 0,
            self.summary.healthy, self.summary.down,
        )
        return self.summary

    def stop(self) -> None:
        """Cooperative stop: no new targets are dequeued, in-flight fetches finish."""
        self.frontier.close()

    async def shutdown(self, grace: float) -> None:
        """Stop, give in-flight fetches *grace* seconds, then abandon them."""
        self.stop()
        running = [w for w in self._workers if not w.done()]
        if not running:
            return
        _, pending = await asyncio.wait(running, timeout=grace)
        if pending:
            self.logger.warning("Отмена %d незавершённых запросов", len(pending))
        await self._cancel_workers()

    async def _cancel_workers(self) -> None:
        for w in self._workers:
            if not w.done():
                w.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)

    async def _worker(self) -> None:
        while True:
            target = await self.frontier.dequeue()
            if target is None:
                return
            try:
                await self._process(target)
            except Exception as e:
                self.logger.exception("Worker failed on %s", target.url)
                self.reporter.report_error(f"Processing {target.url} failed: {e}")
            finally:
                self.frontier.task_done()

    async def _process(self, target: CrawlTarget) -> None:
        outcome = await self.fetcher.fetch(target.url)
        record = to_record(outcome)
        self.summary.add(record)
        self.reporter.report(record)
        if outcome.failed:
            self.reporter.report_error(f"Request to {target.url} failed. Reason: {outcome.error}")
            return
        if target.depth < self.config.max_depth:
            self._expand(target, outcome.body, outcome.base_url)

    def _expand(self, target: CrawlTarget, body: str, base_url: str) -> int:
        added = 0
        for href in extract_links(body):
            try:
                url = normalize(href, base_url)
            except InvalidURLError as e:
                self.logger.debug("Skip link on %s: %s", target.url, e)
                continue
            if self.frontier.enqueue(CrawlTarget(url, target.depth + 1)):
                added += 1
        self.logger.debug("%s: +%d new link(s)", target.url, added)
        return added
