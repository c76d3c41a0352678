# sitemap_warmer/crawler/notifier.py
"""
Search engine sitemap ping.
"""
from __future__ import annotations

from sitemap_warmer.crawler.fetcher import Fetcher
from sitemap_warmer.errors import TransportError
from sitemap_warmer.logger import logger


class Notifier:
    """Issues one GET ``<ping_url>?sitemap=<sitemap_url>``; never raises."""

    def __init__(self, fetcher: Fetcher, ping_url: str, sitemap_url: str) -> None:
        self.fetcher = fetcher
        self.ping_url = ping_url
        self.sitemap_url = sitemap_url

    async def notify(self) -> bool:
        logger.info("Notifying %s for re-crawl.", self.ping_url)
        try:
            status, _ = await self.fetcher.request(
                self.ping_url, params={"sitemap": self.sitemap_url}
            )
        except TransportError as exc:
            logger.warning("Ping failed: %s", exc)
            return False
        if status >= 400:
            logger.warning("Ping failed: %s -> HTTP %d", self.ping_url, status)
            return False
        logger.info("Search engine notified.")
        return True


__all__ = ["Notifier"]
