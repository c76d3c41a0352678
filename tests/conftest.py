# File: tests/conftest.py
from __future__ import annotations

import asyncio
import socket
from collections import Counter
from collections.abc import AsyncIterator
from typing import Dict, Iterable, List, Sequence, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web

from sitemap_warmer.config import WarmerConfig

SM_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XHTML_NS = "http://www.w3.org/1999/xhtml"

UrlSpec = Union[str, Tuple[str, Sequence[str]]]


# --------------------------------------------------------------------------- #
#                               Helper utilities                              #
# --------------------------------------------------------------------------- #


def sitemap_index(locations: Iterable[str]) -> str:
    """Build a ``<sitemapindex>`` document."""
    body = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locations)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex xmlns="{SM_NS}">{body}</sitemapindex>'


def urlset(entries: Iterable[UrlSpec]) -> str:
    """Build a ``<urlset>``; an entry is a location or ``(location, alternates)``."""
    parts: List[str] = []
    for entry in entries:
        loc, alternates = (entry, ()) if isinstance(entry, str) else entry
        links = "".join(
            f'<xhtml:link rel="alternate" hreflang="x{i}" href="{href}"/>'
            for i, href in enumerate(alternates)
        )
        parts.append(f"<url><loc>{loc}</loc>{links}</url>")
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="{SM_NS}" xmlns:xhtml="{XHTML_NS}">{"".join(parts)}</urlset>'
    )


def closed_port() -> int:
    """Return a local TCP port nobody listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class FakeOrigin:
    """Local origin: serves registered paths, counts hits and in-flight requests.

    ``status`` may be a list, consumed one value per hit (the last one sticks).
    A ``bytes`` body is sent as is, without a charset.
    """

    def __init__(self) -> None:
        self.app = web.Application()
        self.app.router.add_route("GET", "/{tail:.*}", self._handle)
        self.base = ""
        self.routes: Dict[str, Tuple[Union[str, bytes], str]] = {}
        self.statuses: Dict[str, Union[int, List[int]]] = {}
        self.delays: Dict[str, float] = {}
        self.default_delay = 0.0
        self.hits: Counter[str] = Counter()
        self.order: List[str] = []
        self.queries: Dict[str, List[Dict[str, str]]] = {}
        self.headers: Dict[str, Dict[str, str]] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def url(self, path: str) -> str:
        return f"{self.base}{path}"

    def add(
        self,
        path: str,
        body: Union[str, bytes] = "<h1>ok</h1>",
        *,
        status: Union[int, List[int]] = 200,
        content_type: str = "text/html",
        delay: float | None = None,
    ) -> str:
        self.routes[path] = (body, content_type)
        self.statuses[path] = status
        if delay is not None:
            self.delays[path] = delay
        return self.url(path)

    def add_xml(self, path: str, body: Union[str, bytes], *, status: int = 200) -> str:
        return self.add(path, body, status=status, content_type="application/xml")

    def add_documents(self, count: int, prefix: str = "/doc") -> List[str]:
        return [self.add(f"{prefix}{i}") for i in range(count)]

    def document_hits(self, prefix: str = "/doc") -> int:
        return sum(n for path, n in self.hits.items() if path.startswith(prefix))

    def _status(self, path: str) -> int:
        status = self.statuses.get(path, 404)
        if isinstance(status, list):
            return status.pop(0) if len(status) > 1 else status[0]
        return status

    async def _handle(self, request: web.Request) -> web.Response:
        path = request.path
        self.hits[path] += 1
        self.order.append(path)
        self.queries.setdefault(path, []).append(dict(request.query))
        self.headers[path] = dict(request.headers)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(path, self.default_delay)
            if delay:
                await asyncio.sleep(delay)
            status = self._status(path)
            body, content_type = self.routes.get(path, ("not found", "text/plain"))
            if isinstance(body, bytes):
                return web.Response(body=body, status=status, content_type=content_type)
            return web.Response(text=body, status=status, content_type=content_type)
        finally:
            self.in_flight -= 1


# --------------------------------------------------------------------------- #
#                                  Fixtures                                   #
# --------------------------------------------------------------------------- #


@pytest_asyncio.fixture
async def origin() -> AsyncIterator[FakeOrigin]:
    """Start a :class:`FakeOrigin` on a free local port."""
    site = FakeOrigin()
    runner = web.AppRunner(site.app)
    await runner.setup()
    tcp = web.TCPSite(runner, "127.0.0.1", 0)
    await tcp.start()
    port = runner.addresses[0][1]
    site.base = f"http://127.0.0.1:{port}"
    try:
        yield site
    finally:
        await runner.cleanup()


@pytest.fixture()
def make_config():
    """Return a factory for WarmerConfig pointing at ``<base>/sitemap.xml``."""

    def _make(base: str, **overrides) -> WarmerConfig:
        data = dict(
            sitemap_url=f"{base}/sitemap.xml",
            concurrency=4,
            timeout=2.0,
            user_agent="TestAgent/1.0",
            seed=1,
        )
        data.update(overrides)
        return WarmerConfig(**data)

    return _make
