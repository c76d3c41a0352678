# sitemap_warmer/crawler/retry.py
"""
Single best-effort second chance for URLs that failed in the main pass.
"""
from __future__ import annotations

from sitemap_warmer.crawler.failures import FailureTracker
from sitemap_warmer.crawler.fetcher import Fetcher
from sitemap_warmer.crawler.models import RetryResult
from sitemap_warmer.errors import TransportError
from sitemap_warmer.logger import logger


class RetryPass:
    """Re-fetches every tracked failure once, one request at a time.

    The main tracker is only read; outcomes of the retries go to a private
    tracker and end up in the returned :class:`RetryResult`.
    """

    def __init__(self, fetcher: Fetcher, tracker: FailureTracker) -> None:
        self.fetcher = fetcher
        self.tracker = tracker

    async def run(self) -> RetryResult:
        failures = self.tracker.snapshot()
        result = RetryResult(attempted=len(failures))
        if not failures:
            return result

        logger.info("Retrying %d failed documents sequentially ...", len(failures))
        still_failing = FailureTracker()
        for failure in failures:
            logger.debug("Retry %s (was %d)", failure.url, failure.status_code)
            try:
                await self.fetcher.fetch(failure.url, still_failing)
            except TransportError as exc:
                logger.warning("Ошибка соединения при повторе %s: %s", failure.url, exc.cause or exc)
                still_failing.record(failure.url, 0)

        result.failed = still_failing.snapshot()
        result.recovered = result.attempted - len(result.failed)
        logger.info(
            "Retry finished: %d recovered, %d still failing", result.recovered, len(result.failed)
        )
        return result


__all__ = ["RetryPass"]
