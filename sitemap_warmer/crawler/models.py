# sitemap_warmer/crawler/models.py
"""
Data models for the SitemapWarmer fetch pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(slots=True, frozen=True)
class SitemapIndexEntry:
    """Location of a child sitemap listed in a sitemap index."""

    location: str


@dataclass(slots=True)
class DocumentEntry:
    """One ``<url>`` of a urlset: primary location plus alternate links."""

    location: str
    alternates: List[str] = field(default_factory=list)

    def locations(self, include_alternates: bool = True) -> List[str]:
        if include_alternates:
            return [self.location, *self.alternates]
        return [self.location]


@dataclass(slots=True, frozen=True)
class FetchFailure:
    """A failed document fetch. ``status_code`` is 0 for transport errors."""

    url: str
    status_code: int

    @property
    def is_transport_error(self) -> bool:
        return self.status_code == 0


@dataclass(slots=True)
class PoolStats:
    """Timings and counters of the main fetch pass."""

    fetched: int = 0
    duration: float = 0.0
    fetch_durations: List[float] = field(default_factory=list)
    group_durations: List[float] = field(default_factory=list)

    @property
    def average_fetch(self) -> float:
        if not self.fetch_durations:
            return 0.0
        return sum(self.fetch_durations) / len(self.fetch_durations)

    @property
    def average_group(self) -> float:
        if not self.group_durations:
            return 0.0
        return sum(self.group_durations) / len(self.group_durations)


@dataclass(slots=True)
class RetryResult:
    """Outcome of the sequential retry pass."""

    attempted: int = 0
    recovered: int = 0
    failed: List[FetchFailure] = field(default_factory=list)
