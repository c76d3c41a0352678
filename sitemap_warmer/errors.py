"""sitemap_warmer.errors: Иерархия исключений прогрева кэша."""

from __future__ import annotations

from typing import Optional


class WarmerError(Exception):
    """Базовое исключение SitemapWarmer."""


class SitemapParseError(WarmerError):
    """XML не разобран или корневой элемент не тот, что ожидался."""


class TransportError(WarmerError):
    """Сетевая ошибка запроса: отказ соединения, DNS, таймаут."""

    def __init__(self, url: str, cause: Optional[BaseException] = None) -> None:
        self.url = url
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"{url}: {reason}")


class FatalResolutionError(WarmerError):
    """Корневой sitemap недоступен или не разбирается: обходить нечего."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Cannot resolve root sitemap {url}: {reason}")


__all__ = ["WarmerError", "SitemapParseError", "TransportError", "FatalResolutionError"]
