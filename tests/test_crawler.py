# File: tests/test_crawler.py
# Worker pool behaviour on an in-memory site
from __future__ import annotations

import asyncio
import time

import pytest

from conftest import CollectingReporter, FakeFetcher
from link_health.config import CrawlConfig
from link_health.crawler.crawler import LinkHealthCrawler
from link_health.crawler.frontier import Frontier
from link_health.crawler.models import FetchOutcome


async def run_crawler(config: CrawlConfig, reporter: CollectingReporter, fetcher, timeout: float = 10.0):
    async with LinkHealthCrawler(config, reporter, fetcher=fetcher) as crawler:
        return await asyncio.wait_for(crawler.crawl(), timeout=timeout)


@pytest.mark.asyncio()
async def test_ok_missing_and_duplicate(basic_config, reporter):
    fetcher = FakeFetcher({
        "http://a.test/": (200, '<a href="/ok">ok</a><a href="/missing">x</a><a href="/ok">again</a>'),
        "http://a.test/ok": (200, "<h1>fine</h1>"),
        "http://a.test/missing": (404, "<h1>not found</h1>"),
    })
    summary = await run_crawler(basic_config, reporter, fetcher)

    records = reporter.by_url()
    assert len(reporter.records) == 3
    assert set(records) == {"http://a.test/", "http://a.test/ok", "http://a.test/missing"}
    assert records["http://a.test/"].healthy is True
    assert records["http://a.test/ok"].healthy is True
    assert records["http://a.test/missing"].healthy is False
    assert records["http://a.test/missing"].status == 404
    assert fetcher.calls.count("http://a.test/ok") == 1
    assert summary.total == 3
    assert summary.healthy == 2
    assert summary.down == 1
    assert reporter.errors == []


@pytest.mark.asyncio()
async def test_cycle_terminates(reporter):
    config = CrawlConfig(seed_url="http://a.test/", max_depth=5, jitter=0)
    fetcher = FakeFetcher({
        "http://a.test/": (200, '<a href="/">self</a><a href="/b">b</a><a href="http://A.test:80/#x">self</a>'),
        "http://a.test/b": (200, '<a href="/">home</a><a href="/b">self</a>'),
    })
    await run_crawler(config, reporter, fetcher, timeout=5)

    assert sorted(fetcher.calls) == ["http://a.test/", "http://a.test/b"]
    assert len(reporter.records) == 2


@pytest.mark.asyncio()
async def test_max_depth_zero_fetches_only_seed(reporter):
    config = CrawlConfig(seed_url="http://a.test/", max_depth=0, jitter=0)
    fetcher = FakeFetcher({
        "http://a.test/": (200, '<a href="/a">a</a><a href="/b">b</a>'),
        "http://a.test/a": (200, ""),
        "http://a.test/b": (200, ""),
    })
    await run_crawler(config, reporter, fetcher)

    assert fetcher.calls == ["http://a.test/"]
    assert len(reporter.records) == 1


@pytest.mark.asyncio()
async def test_never_fetches_beyond_max_depth(reporter):
    # chain /0 -> /1 -> /2 -> /3 -> /4
    pages = {
        f"http://a.test/{i}": (200, f'<a href="/{i + 1}">next</a>') for i in range(5)
    }
    config = CrawlConfig(seed_url="http://a.test/0", max_depth=2, jitter=0)
    fetcher = FakeFetcher(pages)
    await run_crawler(config, reporter, fetcher)

    assert fetcher.calls == ["http://a.test/0", "http://a.test/1", "http://a.test/2"]


@pytest.mark.asyncio()
async def test_failed_fetch_reported_and_not_expanded(basic_config, reporter):
    fetcher = FakeFetcher({
        "http://a.test/": (200, '<a href="http://down.test/">down</a><a href="/ok">ok</a>'),
        "http://a.test/ok": (200, ""),
    })
    await run_crawler(basic_config, reporter, fetcher)

    records = reporter.by_url()
    assert records["http://down.test/"].healthy is False
    assert records["http://down.test/"].status is None
    assert records["http://a.test/ok"].healthy is True
    assert reporter.errors == ["Request to http://down.test/ failed. Reason: connection refused"]


@pytest.mark.asyncio()
async def test_invalid_links_are_skipped_silently(basic_config, reporter):
    fetcher = FakeFetcher({
        "http://a.test/": (
            200,
            '<a href="mailto:me@a.test">m</a><a href="javascript:void(0)">j</a>'
            '<a href="http://[broken">b</a><a href="ftp://a.test/f">f</a><a href="/ok">ok</a>',
        ),
        "http://a.test/ok": (200, ""),
    })
    await run_crawler(basic_config, reporter, fetcher)

    assert sorted(fetcher.calls) == ["http://a.test/", "http://a.test/ok"]
    assert reporter.errors == []


@pytest.mark.asyncio()
async def test_links_followed_from_error_pages(basic_config, reporter):
    fetcher = FakeFetcher({
        "http://a.test/": (500, '<a href="/ok">ok</a>'),
        "http://a.test/ok": (204, ""),
    })
    await run_crawler(basic_config, reporter, fetcher)

    records = reporter.by_url()
    assert records["http://a.test/"].healthy is False
    assert records["http://a.test/ok"].healthy is True


@pytest.mark.asyncio()
async def test_workers_run_concurrently(reporter):
    links = "".join(f'<a href="/p{i}">p</a>' for i in range(8))
    pages = {"http://a.test/": (200, links)}
    pages.update({f"http://a.test/p{i}": (200, "") for i in range(8)})
    delays = {f"http://a.test/p{i}": 0.2 for i in range(8)}
    config = CrawlConfig(seed_url="http://a.test/", max_depth=1, parallelism=4, jitter=0)
    fetcher = FakeFetcher(pages, delays)

    start = time.perf_counter()
    await run_crawler(config, reporter, fetcher)
    elapsed = time.perf_counter() - start

    assert len(reporter.records) == 9
    assert fetcher.max_active == 4
    assert elapsed < 0.2 * 8 / 2


@pytest.mark.asyncio()
async def test_worker_exception_does_not_abort_crawl(basic_config, reporter):
    class ExplodingFetcher(FakeFetcher):
        async def fetch(self, url: str) -> FetchOutcome:
            if url.endswith("/boom"):
                raise RuntimeError("kaboom")
            return await super().fetch(url)

    fetcher = ExplodingFetcher({
        "http://a.test/": (200, '<a href="/boom">b</a><a href="/ok">ok</a>'),
        "http://a.test/ok": (200, ""),
    })
    summary = await run_crawler(basic_config, reporter, fetcher)

    assert set(reporter.by_url()) == {"http://a.test/", "http://a.test/ok"}
    assert len(reporter.errors) == 1
    assert "http://a.test/boom" in reporter.errors[0]
    assert "kaboom" in reporter.errors[0]
    assert summary.stopped is False


@pytest.mark.asyncio()
async def test_crawl_timeout_abandons_slow_fetches(reporter):
    config = CrawlConfig(
        seed_url="http://a.test/", max_depth=1, jitter=0, timeout=0.1, crawl_timeout=0.2,
    )
    fetcher = FakeFetcher(
        {
            "http://a.test/": (200, '<a href="/slow">s</a><a href="/fast">f</a>'),
            "http://a.test/slow": (200, ""),
            "http://a.test/fast": (200, ""),
        },
        delays={"http://a.test/slow": 30},
    )
    start = time.perf_counter()
    summary = await run_crawler(config, reporter, fetcher)

    assert time.perf_counter() - start < 5
    assert summary.stopped is True
    assert "http://a.test/slow" not in reporter.by_url()
    assert "http://a.test/fast" in reporter.by_url()


@pytest.mark.asyncio()
async def test_stop_signal_halts_new_dequeues(reporter):
    links = "".join(f'<a href="/p{i}">p</a>' for i in range(20))
    pages = {"http://a.test/": (200, links)}
    pages.update({f"http://a.test/p{i}": (200, "") for i in range(20)})
    config = CrawlConfig(seed_url="http://a.test/", max_depth=1, parallelism=1, jitter=0)
    fetcher = FakeFetcher(pages, delays={url: 0.01 for url in pages})

    async with LinkHealthCrawler(config, reporter, fetcher=fetcher) as crawler:
        task = asyncio.create_task(crawler.crawl())
        while len(reporter.records) < 3:
            await asyncio.sleep(0.005)
        crawler.stop()
        summary = await asyncio.wait_for(task, timeout=5)

    assert summary.stopped is True
    assert 3 <= len(reporter.records) < 21


@pytest.mark.asyncio()
async def test_injected_frontier_is_used(basic_config, reporter):
    frontier = Frontier(basic_config.max_depth)
    fetcher = FakeFetcher({"http://a.test/": (200, '<a href="/x">x</a>')})
    async with LinkHealthCrawler(basic_config, reporter, fetcher=fetcher, frontier=frontier) as crawler:
        await crawler.crawl()

    assert frontier.drained is True
    assert frontier.seen_count == 2


@pytest.mark.asyncio()
async def test_independent_crawls_do_not_share_state(basic_config):
    site = {"http://a.test/": (200, '<a href="/x">x</a>'), "http://a.test/x": (200, "")}
    first, second = CollectingReporter(), CollectingReporter()
    await asyncio.gather(
        run_crawler(basic_config, first, FakeFetcher(site)),
        run_crawler(basic_config, second, FakeFetcher(site)),
    )
    assert len(first.records) == 2
    assert len(second.records) == 2


@pytest.mark.asyncio()
async def test_links_resolved_against_final_url(basic_config, reporter):
    class RedirectingFetcher(FakeFetcher):
        async def fetch(self, url: str) -> FetchOutcome:
            if url == "http://a.test/":
                self.calls.append(url)
                return FetchOutcome(
                    url=url, status=200, body='<a href="intro">i</a>', final_url="http://a.test/docs/",
                )
            return await super().fetch(url)

    fetcher = RedirectingFetcher({"http://a.test/docs/intro": (200, "")})
    await run_crawler(basic_config, reporter, fetcher)

    assert set(reporter.by_url()) == {"http://a.test/", "http://a.test/docs/intro"}
    assert reporter.errors == []
