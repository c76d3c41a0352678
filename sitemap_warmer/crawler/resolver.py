# sitemap_warmer/crawler/resolver.py
"""
Resolves a root sitemap into the shuffled, deduplicated list of document URLs.
"""
from __future__ import annotations

import asyncio
import random
from typing import List, Optional, Tuple, Union

from sitemap_warmer.config import WarmerConfig
from sitemap_warmer.crawler.fetcher import Fetcher
from sitemap_warmer.crawler.models import DocumentEntry, SitemapIndexEntry
from sitemap_warmer.errors import FatalResolutionError, SitemapParseError, TransportError
from sitemap_warmer.logger import logger
from sitemap_warmer.parser.sitemap_parser import SitemapKind, parse_sitemap, parse_urlset
from sitemap_warmer.utils import flatten, normalize_url, remove_duplicates, shuffled


class SitemapResolver:
    """Sitemap index → child urlsets → document URLs.

    Only the root sitemap is mandatory; a child sitemap that cannot be
    fetched or parsed is skipped with a warning.
    """

    def __init__(self, fetcher: Fetcher, config: WarmerConfig) -> None:
        self.fetcher = fetcher
        self.config = config
        self.sitemap_url = str(config.sitemap_url)
        self.skipped: List[str] = []
        self.discovered = 0
        self._rng = random.Random(config.seed)

    async def resolve(self) -> List[str]:
        """Return the deduplicated, randomly ordered document URLs.

        ``limit`` is applied after deduplication, so a non-zero limit always
        yields ``min(limit, unique)`` URLs.
        """
        logger.info("Fetching sitemap %s ...", self.sitemap_url)
        kind, entries = await self._fetch_root()

        if kind == "urlset":
            # no index: the root itself lists the documents
            groups: List[Optional[List[str]]] = [
                self._document_urls(entries, self.sitemap_url)  # type: ignore[arg-type]
            ]
        else:
            locations = self._child_locations(entries)  # type: ignore[arg-type]
            logger.info("Fetching %d sub-sitemaps ...", len(locations))
            semaphore = asyncio.Semaphore(self.config.sitemap_concurrency)
            groups = await asyncio.gather(
                *(self._fetch_child(location, semaphore) for location in locations)
            )

        documents = flatten(group for group in groups if group is not None)
        self.discovered = len(documents)
        logger.info("Retrieved %d documents URLs.", len(documents))

        unique = remove_duplicates(shuffled(documents, self._rng))
        if self.config.limit:
            unique = unique[: self.config.limit]
        logger.info("Resolved %d unique URLs to warm.", len(unique))
        return unique

    async def _fetch_root(
        self,
    ) -> Tuple[SitemapKind, Union[List[SitemapIndexEntry], List[DocumentEntry]]]:
        try:
            status, body = await self.fetcher.request_bytes(self.sitemap_url)
        except TransportError as exc:
            raise FatalResolutionError(self.sitemap_url, str(exc)) from exc
        if status >= 400:
            raise FatalResolutionError(self.sitemap_url, f"HTTP {status}")
        try:
            return parse_sitemap(body)
        except SitemapParseError as exc:
            raise FatalResolutionError(self.sitemap_url, str(exc)) from exc

    def _child_locations(self, entries: List[SitemapIndexEntry]) -> List[str]:
        locations = (normalize_url(entry.location, self.sitemap_url) for entry in entries)
        return [url for url in locations if url is not None]

    async def _fetch_child(
        self, location: str, semaphore: asyncio.Semaphore
    ) -> Optional[List[str]]:
        async with semaphore:
            try:
                status, body = await self.fetcher.request_bytes(location)
            except TransportError as exc:
                return self._skip(location, str(exc))
        if status >= 400:
            return self._skip(location, f"HTTP {status}")
        try:
            entries = parse_urlset(body)
        except SitemapParseError as exc:
            return self._skip(location, str(exc))
        return self._document_urls(entries, location)

    def _document_urls(self, entries: List[DocumentEntry], base: str) -> List[str]:
        urls: List[str] = []
        for entry in entries:
            for location in entry.locations(self.config.include_alternates):
                url = normalize_url(location, base)
                if url is not None:
                    urls.append(url)
        return urls

    def _skip(self, location: str, reason: str) -> None:
        logger.warning("Пропущен sitemap %s: %s", location, reason)
        self.skipped.append(location)
        return None


__all__ = ["SitemapResolver"]
