# File: sitemap_warmer/utils.py
"""sitemap_warmer.utils: Утилитарные функции для нормализации URL, перемешивания и дедупликации."""

from __future__ import annotations

import random
from typing import Collection, Iterable, List, Optional, Sequence
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from sitemap_warmer.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "is_absolute_http_url",
    "shuffled",
    "remove_duplicates",
    "flatten",
)


_PATH_SAFE = "/%:@!$&'()*+,;="


def is_absolute_http_url(url: str) -> bool:
    """Проверяет, что URL абсолютный и использует http(s)."""
    parsed = urlsplit(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def normalize_url(location: str, base: Optional[str] = None) -> Optional[str]:
    """Приводит ``<loc>`` к абсолютному URL.

    Относительные пути разрешаются относительно *base* (URL sitemap, где они
    объявлены). Схема и хост приводятся к нижнему регистру, фрагмент
    отбрасывается, путь percent-кодируется. Возвращает ``None``, если
    абсолютный http(s) URL получить нельзя.
    """
    location = location.strip()
    if not location:
        return None
    absolute = urljoin(base, location) if base else location
    if not is_absolute_http_url(absolute):
        logger.debug("Rejected location: %r (base=%s)", location, base)
        return None
    parts = urlsplit(absolute)
    # не-ASCII символы кодируются, уже закодированные %XX остаются как есть
    path = quote(parts.path or "/", safe=_PATH_SAFE)
    normalized = urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))
    if normalized != location:
        logger.debug("Normalized URL: %s -> %s", location, normalized)
    return normalized


def flatten(groups: Iterable[Iterable[str]]) -> List[str]:
    """Склеивает списки URL в один список."""
    return [url for group in groups for url in group]


def shuffled(urls: Iterable[str], rng: Optional[random.Random] = None) -> List[str]:
    """Возвращает равномерно перемешанную копию (Fisher–Yates из ``random.shuffle``)."""
    result = list(urls)
    (rng or random.Random()).shuffle(result)
    return result


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок первого вхождения."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
