# File: tests/test_server.py
from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import ClientSession, web

from site_snapshot.server import create_app
from site_snapshot.storage.encoder import encode_path
from site_snapshot.storage.writer import write_artifact

PAGES = {
    "https://example.test/": b"<html>root</html>",
    "https://example.test/about": b"<html>about</html>",
    "https://example.test/about/team": b"<html>team</html>",
    "https://example.test/_private": b"<html>underscore</html>",
    "https://example.test/caf%C3%A9": b"<html>cafe</html>",
}


@pytest.fixture()
def snapshot_root(tmp_path: Path) -> Path:
    for url, body in PAGES.items():
        write_artifact(tmp_path / encode_path(url), body)
    return tmp_path / "example.test"


@pytest_asyncio.fixture
async def served(snapshot_root: Path, unused_tcp_port: int) -> AsyncIterator[str]:
    runner = web.AppRunner(create_app(snapshot_root))
    await runner.setup()
    await web.TCPSite(runner, "127.0.0.1", unused_tcp_port).start()
    try:
        yield f"http://127.0.0.1:{unused_tcp_port}"
    finally:
        await runner.cleanup()


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "path,body",
    [
        ("/", b"<html>root</html>"),
        ("/about", b"<html>about</html>"),
        ("/about/team", b"<html>team</html>"),
        ("/_private", b"<html>underscore</html>"),
        ("/%5Fprivate", b"<html>underscore</html>"),
        ("/caf%C3%A9", b"<html>cafe</html>"),
        ("/about?ignored=1", b"<html>about</html>"),
    ],
)
async def test_serves_stored_pages(served: str, path: str, body: bytes):
    async with ClientSession() as session:
        async with session.get(served + path) as resp:
            assert resp.status == 200
            assert resp.headers["Content-Type"].startswith("text/html")
            assert await resp.read() == body


@pytest.mark.asyncio()
@pytest.mark.parametrize("path", ["/missing", "/about/", "/about/team/extra", "/_about"])
async def test_unknown_paths_are_404(served: str, path: str):
    async with ClientSession() as session:
        async with session.get(served + path) as resp:
            assert resp.status == 404
