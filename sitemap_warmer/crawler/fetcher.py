# sitemap_warmer/crawler/fetcher.py
"""
Fetcher module: HTTP GET over one keep-alive connection pool for the whole run.
"""
from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Tuple

from aiohttp import ClientError, ClientSession, ClientTimeout, TCPConnector

from sitemap_warmer.config import WarmerConfig
from sitemap_warmer.crawler.failures import FailureTracker
from sitemap_warmer.errors import TransportError
from sitemap_warmer.logger import logger

# keep idle connections to the origin between workers' requests
_KEEPALIVE_TIMEOUT = 30.0


class Fetcher:
    """Performs single GET requests with the crawler headers and a per-request timeout.

    Status codes >= 400 are not exceptions: the body is returned as usual and
    the failure is appended to the tracker passed by the caller. Transport
    errors (connection refused, DNS, timeout) raise :class:`TransportError`.
    """

    def __init__(self, config: WarmerConfig) -> None:
        self.config = config
        self._session: Optional[ClientSession] = None

    def _headers(self) -> dict[str, str]:
        return {
            "Accept-Encoding": "gzip",
            self.config.geo_header: self.config.country_code,
            "User-Agent": self.config.user_agent,
        }

    async def __aenter__(self) -> Fetcher:
        if self._session is None:
            connector = TCPConnector(
                limit=self.config.concurrency + self.config.sitemap_concurrency,
                keepalive_timeout=_KEEPALIVE_TIMEOUT,
            )
            self._session = ClientSession(
                connector=connector,
                timeout=ClientTimeout(total=self.config.timeout),
                headers=self._headers(),
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    @property
    def session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError("Session not initialized. Use 'async with Fetcher(...)'.")
        return self._session

    async def request(
        self, url: str, params: Optional[Mapping[str, Any]] = None
    ) -> Tuple[int, str]:
        """GET *url* and return ``(status, body)``; transport errors raise TransportError."""
        try:
            async with self.session.get(url, params=params) as resp:
                text = await resp.text(errors="replace")
                return resp.status, text
        except (ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(url, exc) from exc

    async def request_bytes(self, url: str) -> Tuple[int, bytes]:
        """GET *url* and return the raw body.

        Used for sitemaps: lxml decodes XML itself, following the
        ``<?xml encoding=...?>`` declaration.
        """
        try:
            async with self.session.get(url) as resp:
                return resp.status, await resp.read()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(url, exc) from exc

    async def fetch(self, url: str, tracker: Optional[FailureTracker] = None) -> str:
        """
        Fetch the URL and return its body text.

        A status >= 400 is recorded in *tracker* (when given) and logged, the
        body is still returned.
        """
        status, text = await self.request(url)
        if status >= 400:
            logger.warning("Ошибка загрузки %s: HTTP %d", url, status)
            if tracker is not None:
                tracker.record(url, status)
        return text
