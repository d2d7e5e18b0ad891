# link_health/crawler/frontier.py
"""
Frontier: the visited set plus the FIFO of pending targets, shared by workers.
"""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Deque, Optional, Set

from link_health.crawler.models import CrawlTarget

__all__ = ("Frontier",)


class Frontier:
    """
    Deduplicating work queue with drain detection.

    ``enqueue`` never suspends, so the seen-check and the insert happen in one
    step of the event loop: for a given URL exactly one caller observes it as
    new. Targets deeper than ``max_depth`` are rejected before the seen-check
    and are not remembered, so a later discovery at an allowed depth is still
    accepted.
    """

    def __init__(self, max_depth: int) -> None:
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.max_depth = max_depth
        self._seen: Set[str] = set()
        self._pending: Deque[CrawlTarget] = deque()
        self._in_flight = 0
        self._closed = False
        self._changed = asyncio.Event()
        self._drained = asyncio.Event()
        self.logger = logging.getLogger("LinkHealth")

    # -- state -----------------------------------------------------------
    @property
    def seen_count(self) -> int:
        return len(self._seen)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def drained(self) -> bool:
        return self._drained.is_set()

    def depth_allows(self, depth: int) -> bool:
        return depth <= self.max_depth

    # -- producer side ---------------------------------------------------
    def enqueue(self, target: CrawlTarget) -> bool:
        """Queue *target* unless it is too deep or its URL was seen already."""
        if not self.depth_allows(target.depth):
            self.logger.debug("Depth %d exceeds limit, skipping %s", target.depth, target.url)
            return False
        if self._closed or target.url in self._seen:
            return False
        self._seen.add(target.url)
        self._pending.append(target)
        self._changed.set()
        return True

    # -- consumer side ---------------------------------------------------
    async def dequeue(self) -> Optional[CrawlTarget]:
        """
        Return the next pending target, or None once the crawl is over.

        Waits while the queue is empty but other targets are still being
        processed, since they may enqueue more work.
        """
        while True:
            if self._closed:
                self._check_drained()
                return None
            if self._pending:
                self._in_flight += 1
                return self._pending.popleft()
            if self._in_flight == 0:
                self._check_drained()
                return None
            self._changed.clear()
            await self._changed.wait()

    def task_done(self) -> None:
        """Mark one dequeued target as finished."""
        if self._in_flight <= 0:
            raise ValueError("task_done() called more times than dequeue()")
        self._in_flight -= 1
        self._check_drained()
        self._changed.set()

    def close(self) -> None:
        """Stop handing out targets; waiting consumers return None."""
        if not self._closed:
            self._closed = True
            self.logger.info("Frontier closed with %d pending target(s)", len(self._pending))
            self._check_drained()
        self._changed.set()

    async def wait_drained(self) -> None:
        await self._drained.wait()

    def _check_drained(self) -> None:
        # drained: nothing in flight and nothing more will be handed out
        if self._drained.is_set() or self._in_flight:
            return
        if self._pending and not self._closed:
            return
        self._drained.set()
        self._changed.set()
        self.logger.debug("Frontier drained: %d unique URL(s) seen", len(self._seen))
