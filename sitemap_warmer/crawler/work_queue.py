# sitemap_warmer/crawler/work_queue.py
"""
Shared work queue drained by the worker pool.
"""
from __future__ import annotations

import threading
from typing import Iterable, List, Optional


class WorkQueue:
    """Pool of pending document URLs; every entry is handed out exactly once.

    ``take`` pops the last element under a lock, so it is safe both for
    asyncio tasks and for OS threads. No FIFO guarantee.
    """

    def __init__(self, urls: Iterable[str]) -> None:
        # dict.fromkeys keeps set semantics while preserving the given order
        self._items: List[str] = list(dict.fromkeys(urls))
        self._lock = threading.Lock()
        self.total = len(self._items)

    def take(self) -> Optional[str]:
        """Remove and return one URL, or ``None`` when the queue is drained."""
        with self._lock:
            if not self._items:
                return None
            return self._items.pop()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"<WorkQueue remaining={len(self)} total={self.total}>"
