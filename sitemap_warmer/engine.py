# File: sitemap_warmer/engine.py
"""sitemap_warmer.engine: Оркестрация прогрева: резолв → пул → повтор → пинг."""

from __future__ import annotations

import time
from typing import List, Optional

from sitemap_warmer.aggregator import WarmupReport, aggregate_results
from sitemap_warmer.config import WarmerConfig
from sitemap_warmer.crawler.failures import FailureTracker
from sitemap_warmer.crawler.fetcher import Fetcher
from sitemap_warmer.crawler.models import RetryResult
from sitemap_warmer.crawler.notifier import Notifier
from sitemap_warmer.crawler.pool import WorkerPool
from sitemap_warmer.crawler.resolver import SitemapResolver
from sitemap_warmer.crawler.retry import RetryPass
from sitemap_warmer.crawler.work_queue import WorkQueue
from sitemap_warmer.logger import logger

__all__ = ["Engine", "run_warmup", "resolve_urls"]


class Engine:
    """Фасад для CLI и тестов: фазы выполняются строго последовательно."""

    def __init__(self, config: WarmerConfig) -> None:
        """Инициализирует Engine с заданной конфигурацией прогрева."""
        self.config = config
        self.tracker = FailureTracker()

    async def resolve(self) -> List[str]:
        """Только резолв sitemap, без прогрева."""
        async with Fetcher(self.config) as fetcher:
            return await SitemapResolver(fetcher, self.config).resolve()

    async def run(self) -> WarmupReport:
        """Запускает полный прогон и возвращает сводный отчёт.

        Ошибки отдельных документов не прерывают прогон; FatalResolutionError
        (корневой sitemap) пробрасывается вызывающему.
        """
        start = time.monotonic()
        sitemap_url = str(self.config.sitemap_url)
        retry: Optional[RetryResult] = None
        notified: Optional[bool] = None

        async with Fetcher(self.config) as fetcher:
            resolver = SitemapResolver(fetcher, self.config)
            urls = await resolver.resolve()

            pool = WorkerPool(
                fetcher,
                self.tracker,
                concurrency=self.config.concurrency,
                progress_every=self.config.progress_every,
            )
            stats = await pool.run(WorkQueue(urls))

            if self.config.retry:
                retry = await RetryPass(fetcher, self.tracker).run()

            if self.config.notify:
                notified = await Notifier(fetcher, str(self.config.ping_url), sitemap_url).notify()

        duration = time.monotonic() - start
        logger.info("Finished in %.2fs !", duration)
        return aggregate_results(
            sitemap_url,
            discovered=resolver.discovered,
            resolved=len(urls),
            stats=stats,
            failures=self.tracker.snapshot(),
            retry=retry,
            notified=notified,
            skipped_sitemaps=resolver.skipped,
            duration=duration,
        )


async def run_warmup(config: WarmerConfig) -> WarmupReport:
    """Запускает прогрев по конфигу и возвращает WarmupReport."""
    return await Engine(config).run()


async def resolve_urls(config: WarmerConfig) -> List[str]:
    """Возвращает список URL, которые были бы прогреты."""
    return await Engine(config).resolve()
