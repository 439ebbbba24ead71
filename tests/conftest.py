# File: tests/conftest.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Union

import pytest
import pytest_asyncio
from aiohttp import web

from site_snapshot.config import SnapshotConfig

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
Route = Union[str, bytes, Handler]


@dataclass
class SiteServer:
    """A running test site: its base URL and every request path it received."""

    base_url: str
    hits: List[str] = field(default_factory=list)

    def url(self, path: str) -> str:
        return self.base_url + path


@pytest_asyncio.fixture
async def serve_site(unused_tcp_port_factory):
    """
    Start a site from ``{path: body | handler}``.

    String and bytes bodies are always sent as ``text/html`` so that tests
    exercise content sniffing, not the header. Unknown paths answer 404.
    """
    runners: List[web.AppRunner] = []

    async def _start(routes: Dict[str, Route]) -> SiteServer:
        port = unused_tcp_port_factory()
        server = SiteServer(base_url=f"http://127.0.0.1:{port}")

        async def handle(request: web.Request) -> web.StreamResponse:
            server.hits.append(request.path_qs)
            route = routes.get(request.path)
            if route is None:
                raise web.HTTPNotFound()
            if callable(route):
                return await route(request)
            body = route.encode("utf-8") if isinstance(route, str) else route
            return web.Response(body=body, content_type="text/html")

        app = web.Application()
        app.router.add_get("/{tail:.*}", handle)
        runner = web.AppRunner(app)
        await runner.setup()
        await web.TCPSite(runner, "127.0.0.1", port).start()
        runners.append(runner)
        return server

    yield _start

    for runner in runners:
        await runner.cleanup()


@pytest.fixture()
def html_page() -> Callable[..., str]:
    """Build a minimal HTML document with one anchor per href."""

    def _page(*hrefs: str, title: str = "page") -> str:
        anchors = "".join(f'<a href="{href}">{href}</a>' for href in hrefs)
        return f"<!DOCTYPE html><html><head><title>{title}</title></head><body>{anchors}</body></html>"

    return _page


@pytest.fixture()
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture()
def make_config(output_dir: Path) -> Callable[..., SnapshotConfig]:
    """Return a factory for SnapshotConfig writing under *output_dir*."""

    def _make(site_url: str, **kwargs) -> SnapshotConfig:
        kwargs.setdefault("timeout", 5.0)
        return SnapshotConfig(site_url=site_url, output_dir=output_dir, **kwargs)

    return _make
