# sitemap_warmer/crawler/pool.py
"""
Fixed-width pool of fetch workers draining a shared WorkQueue.
"""
from __future__ import annotations

import asyncio
import math
import time

from sitemap_warmer.crawler.failures import FailureTracker
from sitemap_warmer.crawler.fetcher import Fetcher
from sitemap_warmer.crawler.models import PoolStats
from sitemap_warmer.crawler.work_queue import WorkQueue
from sitemap_warmer.errors import TransportError
from sitemap_warmer.logger import logger


class WorkerPool:
    """Runs ``concurrency`` independent fetch loops until the queue is empty.

    Workers share nothing but the queue and the failure tracker. A transport
    error is recorded as ``FetchFailure(url, 0)`` and the worker moves on.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        tracker: FailureTracker,
        concurrency: int,
        progress_every: int = 100,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if progress_every < 1:
            raise ValueError("progress_every must be >= 1")
        self.fetcher = fetcher
        self.tracker = tracker
        self.concurrency = concurrency
        self.progress_every = progress_every
        self._stats = PoolStats()
        self._group_start = 0.0
        self._groups_total = 0
        self._total = 0

    async def run(self, queue: WorkQueue) -> PoolStats:
        total = self._total = len(queue)
        self._stats = PoolStats()
        self._groups_total = math.ceil(total / self.progress_every)
        width = min(self.concurrency, total) or 1
        logger.info(
            "Fetching %d documents with %d concurrent workers.", total, width
        )

        start = time.monotonic()
        self._group_start = start
        workers = [asyncio.create_task(self._worker(queue)) for _ in range(width)]
        await asyncio.gather(*workers)
        self._stats.duration = time.monotonic() - start

        logger.info(
            "Fetched %d documents in %.2f s (avg %.0f ms per document, %d failures)",
            self._stats.fetched,
            self._stats.duration,
            self._stats.average_fetch * 1000,
            len(self.tracker),
        )
        if self._stats.group_durations:
            logger.info("Group fetch average duration: %.0f ms", self._stats.average_group * 1000)
        return self._stats

    async def _worker(self, queue: WorkQueue) -> None:
        while True:
            url = queue.take()
            if url is None:
                return
            started = time.monotonic()
            try:
                await self.fetcher.fetch(url, self.tracker)
            except TransportError as exc:
                logger.warning("Ошибка соединения %s: %s", url, exc.cause or exc)
                self.tracker.record(url, 0)
            self._done(time.monotonic() - started)

    def _done(self, elapsed: float) -> None:
        stats = self._stats
        stats.fetched += 1
        stats.fetch_durations.append(elapsed)
        if stats.fetched % self.progress_every and stats.fetched != self._total:
            return
        now = time.monotonic()
        group = now - self._group_start
        self._group_start = now
        stats.group_durations.append(group)
        logger.info(
            "Fetched group %d/%d in %.0f ms (%d/%d)",
            len(stats.group_durations),
            self._groups_total,
            group * 1000,
            stats.fetched,
            self._total,
        )


__all__ = ["WorkerPool"]
