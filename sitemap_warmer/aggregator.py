# File: sitemap_warmer/aggregator.py
"""sitemap_warmer.aggregator: Сводный отчёт о прогреве."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, TypedDict

from sitemap_warmer.crawler.models import FetchFailure, PoolStats, RetryResult


class FailureInfo(TypedDict):
    """Неудачный запрос в сериализуемом виде."""

    url: str
    status: int


@dataclass(slots=True)
class WarmupReport:
    """Результаты прогона: счётчики, ошибки, повтор, пинг и тайминги."""

    sitemap_url: str
    discovered: int = 0
    resolved: int = 0
    fetched: int = 0
    failures: List[FailureInfo] = field(default_factory=list)
    retried: Optional[int] = None
    recovered: Optional[int] = None
    remaining_failures: List[FailureInfo] = field(default_factory=list)
    notified: Optional[bool] = None
    skipped_sitemaps: List[str] = field(default_factory=list)
    duration: float = 0.0
    fetch_duration: float = 0.0
    average_fetch_ms: float = 0.0
    average_group_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """Нет ошибок, оставшихся после повтора."""
        return not self.remaining_failures

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление WarmupReport."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)

    def summary(self) -> str:
        """Однострочная сводка для CLI."""
        parts = [
            f"{self.fetched}/{self.resolved} fetched",
            f"{len(self.failures)} failed",
        ]
        if self.retried is not None:
            parts.append(f"{self.recovered} recovered on retry")
        parts.append(f"{len(self.remaining_failures)} remaining")
        if self.notified is not None:
            parts.append("notified" if self.notified else "notify failed")
        parts.append(f"{self.duration:.2f}s")
        return ", ".join(parts)


def _failure_info(failures: List[FetchFailure]) -> List[FailureInfo]:
    return [{"url": f.url, "status": f.status_code} for f in failures]


def aggregate_results(
    sitemap_url: str,
    *,
    discovered: int,
    resolved: int,
    stats: PoolStats,
    failures: List[FetchFailure],
    retry: Optional[RetryResult] = None,
    notified: Optional[bool] = None,
    skipped_sitemaps: Optional[List[str]] = None,
    duration: float = 0.0,
) -> WarmupReport:
    """Собирает все части отчёта в WarmupReport."""
    report = WarmupReport(
        sitemap_url=sitemap_url,
        discovered=discovered,
        resolved=resolved,
        fetched=stats.fetched,
        failures=_failure_info(failures),
        notified=notified,
        skipped_sitemaps=list(skipped_sitemaps or []),
        duration=duration,
        fetch_duration=stats.duration,
        average_fetch_ms=stats.average_fetch * 1000,
        average_group_ms=stats.average_group * 1000,
    )
    if retry is not None:
        report.retried = retry.attempted
        report.recovered = retry.recovered
        report.remaining_failures = _failure_info(retry.failed)
    else:
        report.remaining_failures = list(report.failures)
    return report


__all__ = ["WarmupReport", "FailureInfo", "aggregate_results"]
