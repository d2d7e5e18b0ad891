"""link_health.engine: слой оркестрации для запуска обхода и сбора сводки."""

from __future__ import annotations

import asyncio

from link_health.aggregator import CrawlSummary
from link_health.config import CrawlConfig
from link_health.crawler.crawler import LinkHealthCrawler
from link_health.logger import logger
from link_health.report import Reporter

__all__ = ["start_crawl", "run_crawl"]


async def start_crawl(config: CrawlConfig, reporter: Reporter) -> CrawlSummary:
    """Открывает сессию, выполняет обход и возвращает сводку."""
    async with LinkHealthCrawler(config, reporter) as crawler:
        return await crawler.crawl()


def run_crawl(config: CrawlConfig, reporter: Reporter) -> CrawlSummary:
    """Синхронная обёртка над :func:`start_crawl` для CLI."""
    logger.info("Starting crawl…")
    try:
        return asyncio.run(start_crawl(config, reporter))
    except Exception as exc:
        logger.error("Crawl failed: %s", exc)
        raise
