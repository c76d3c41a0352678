# sitemap_warmer/crawler/failures.py
"""
Append-only collection of fetch failures shared by all workers.
"""
from __future__ import annotations

import threading
from typing import Iterator, List

from sitemap_warmer.crawler.models import FetchFailure


class FailureTracker:
    """Thread-safe, append-only list of :class:`FetchFailure`."""

    def __init__(self) -> None:
        self._failures: List[FetchFailure] = []
        self._lock = threading.Lock()

    def add(self, failure: FetchFailure) -> None:
        with self._lock:
            self._failures.append(failure)

    def record(self, url: str, status_code: int) -> FetchFailure:
        """Shortcut for ``add(FetchFailure(url, status_code))``."""
        failure = FetchFailure(url, status_code)
        self.add(failure)
        return failure

    def snapshot(self) -> List[FetchFailure]:
        """Copy of the failures recorded so far, in insertion order."""
        with self._lock:
            return list(self._failures)

    def urls(self) -> List[str]:
        return [f.url for f in self.snapshot()]

    def __iter__(self) -> Iterator[FetchFailure]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._failures)

    def __bool__(self) -> bool:
        return len(self) > 0
