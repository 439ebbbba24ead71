# File: tests/test_crawler.py
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

import pytest
from aiohttp import web

from site_snapshot.config import SnapshotConfig
from site_snapshot.crawler.crawler import CrawlState, SnapshotCrawler
from site_snapshot.crawler.models import CrawlResult, StoredPage
from site_snapshot.engine import start_snapshot
from site_snapshot.errors import ErrorKind, SnapshotError

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

#: seconds a slow handler holds its request in the parallelism tests
SLOW_SLEEP: float = 0.2


async def run_crawler(config: SnapshotConfig, **callbacks) -> CrawlResult:
    return await asyncio.wait_for(start_snapshot(config, **callbacks), timeout=30)


# --------------------------------------------------------------------------- #
#                                   Tests                                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_end_to_end_snapshot(serve_site, make_config, html_page, output_dir: Path):
    server = None

    async def root(_):
        body = html_page(
            "/about",
            "/about/team",
            "https://other.test/x",
            server.base_url.replace("127.0.0.1", "localhost") + "/foreign",
        )
        return web.Response(text=body, content_type="text/html")

    server = await serve_site({
        "/": root,
        "/about": html_page(title="about"),
        "/about/team": html_page(title="team"),
        "/foreign": html_page(title="foreign"),
    })
    printed: List[str] = []

    result = await run_crawler(make_config(server.base_url), on_stored=lambda page: printed.append(page.url))

    root_url = server.url("/")
    assert printed == [root_url, server.url("/about"), server.url("/about/team")]
    assert [p.url for p in result.stored] == printed
    assert result.failures == []
    assert "/foreign" not in server.hits

    host = output_dir / "127.0.0.1"
    assert (host / "_").is_file()
    assert (host / "_about").read_text() == html_page(title="about")
    assert (host / "about" / "_team").read_text() == html_page(title="team")


@pytest.mark.asyncio()
async def test_query_variants_of_one_path_are_fetched_once(serve_site, make_config, html_page, output_dir):
    server = await serve_site({
        "/": html_page("/about?a=1", "/about?a=2"),
        "/about": html_page(title="about"),
    })

    result = await run_crawler(make_config(server.base_url))

    assert [p.url for p in result.stored] == [server.url("/"), server.url("/about?a=1")]
    assert "/about?a=1" in server.hits
    assert "/about?a=2" not in server.hits
    assert (output_dir / "127.0.0.1" / "_about").is_file()


@pytest.mark.asyncio()
async def test_cyclic_links_terminate(serve_site, make_config, html_page):
    server = await serve_site({
        "/": html_page("/a", "/b"),
        "/a": html_page("/b", "/", "/a"),
        "/b": html_page("/a", "/"),
    })
    config = make_config(server.base_url)

    async with SnapshotCrawler(config) as crawler:
        assert crawler.state is CrawlState.NOT_STARTED
        result = await asyncio.wait_for(crawler.crawl(), timeout=30)
        assert crawler.state is CrawlState.DONE
        assert len(crawler.visited) == 3

    assert sorted(server.hits) == ["/", "/a", "/b"]
    assert len(result.stored) == 3


@pytest.mark.asyncio()
async def test_shared_link_is_fetched_once_under_concurrency(serve_site, make_config, html_page):
    pages = [f"/p{i}" for i in range(12)]
    routes = {"/": html_page(*pages), "/shared": html_page(title="shared")}
    routes.update({p: html_page("/shared", "/", *pages) for p in pages})
    server = await serve_site(routes)

    result = await run_crawler(make_config(server.base_url))

    assert server.hits.count("/shared") == 1
    for p in pages:
        assert server.hits.count(p) == 1
    assert len(result.stored) == len(pages) + 2


@pytest.mark.asyncio()
async def test_non_html_links_are_skipped_and_not_retried(serve_site, make_config, output_dir):
    server = await serve_site({
        "/": '<html><body><a href="/data"></a><img src="/logo.png"><a href="/data"></a>'
             '<a href="/page">p</a></body></html>',
        "/data": '{"items": []}',
        "/logo.png": PNG,
        "/page": '<html><body><a href="/data"></a></body></html>',
    })
    failed: List[str] = []

    result = await run_crawler(
        make_config(server.base_url),
        on_failed=lambda url, err: failed.append(f"{url}\t{err}"),
    )

    assert {f.kind for f in result.failures} == {ErrorKind.CONTENT_TYPE}
    assert [f.url for f in result.failures] == [server.url("/data"), server.url("/logo.png")]
    assert failed[0] == f"{server.url('/data')}\tbad-content-type: wrong content-type: application/json"
    assert server.hits.count("/data") == 1
    host = output_dir / "127.0.0.1"
    assert not (host / "_data").exists()
    assert not (host / "_logo.png").exists()
    assert (host / "_page").is_file()


@pytest.mark.asyncio()
async def test_failed_page_does_not_stop_the_crawl(serve_site, make_config, html_page):
    async def flaky(_):
        return web.Response(status=503, text="<html>busy</html>", content_type="text/html")

    server = await serve_site({
        "/": html_page("/missing", "/flaky", "/ok"),
        "/flaky": flaky,
        "/ok": html_page("/flaky"),
    })

    result = await run_crawler(make_config(server.base_url))

    assert [p.url for p in result.stored] == [server.url("/"), server.url("/ok")]
    assert [(f.url, f.kind) for f in result.failures] == [
        (server.url("/missing"), ErrorKind.FETCH),
        (server.url("/flaky"), ErrorKind.FETCH),
    ]
    assert server.hits.count("/flaky") == 1


@pytest.mark.asyncio()
async def test_root_failure_is_fatal(serve_site, make_config):
    server = await serve_site({"/": b'{"not": "html"}'})

    with pytest.raises(SnapshotError) as exc_info:
        await run_crawler(make_config(server.base_url))
    assert exc_info.value.kind is ErrorKind.CONTENT_TYPE


@pytest.mark.asyncio()
async def test_root_is_stored_even_without_links(serve_site, make_config, html_page):
    server = await serve_site({"/start": html_page()})
    stored: List[StoredPage] = []

    result = await run_crawler(make_config(server.url("/start")), on_stored=stored.append)

    assert [p.url for p in stored] == [server.url("/start")]
    assert result.stored == stored
    assert result.duration >= 0


async def _slow_site(serve_site, html_page, fanout: int):
    """Root links /p0..pN; each /pi links a slow /slow_i. Tracks peak concurrency."""
    stats = {"active": 0, "peak": 0}

    async def slow(_):
        stats["active"] += 1
        stats["peak"] = max(stats["peak"], stats["active"])
        await asyncio.sleep(SLOW_SLEEP)
        stats["active"] -= 1
        return web.Response(text=html_page(title="slow"), content_type="text/html")

    routes = {"/": html_page(*(f"/p{i}" for i in range(fanout)))}
    for i in range(fanout):
        routes[f"/p{i}"] = html_page(f"/slow{i}")
        routes[f"/slow{i}"] = slow
    server = await serve_site(routes)
    return server, stats


@pytest.mark.asyncio()
async def test_parallelism_limit_is_respected(serve_site, make_config, html_page):
    server, stats = await _slow_site(serve_site, html_page, fanout=6)

    result = await run_crawler(make_config(server.base_url, parallelism=2))

    assert len(result.stored) == 13
    assert stats["peak"] <= 2


@pytest.mark.asyncio()
async def test_unbounded_by_default(serve_site, make_config, html_page):
    server, stats = await _slow_site(serve_site, html_page, fanout=6)

    result = await run_crawler(make_config(server.base_url))

    assert len(result.stored) == 13
    assert stats["peak"] > 2


@pytest.mark.asyncio()
async def test_crawl_runs_once(serve_site, make_config, html_page):
    server = await serve_site({"/": html_page()})

    async with SnapshotCrawler(make_config(server.base_url)) as crawler:
        await crawler.crawl()
        with pytest.raises(RuntimeError):
            await crawler.crawl()


@pytest.mark.asyncio()
async def test_crawl_requires_session(make_config):
    crawler = SnapshotCrawler(make_config("http://127.0.0.1:9/"))
    with pytest.raises(RuntimeError):
        await crawler.crawl()


@pytest.mark.asyncio()
async def test_links_resolve_against_base_href(serve_site, make_config):
    server = await serve_site({
        "/": '<html><head><base href="/docs/"></head><body><a href="guide">G</a></body></html>',
        "/docs/guide": "<html><body>guide</body></html>",
    })

    result = await run_crawler(make_config(server.base_url))

    assert [p.url for p in result.stored] == [server.url("/"), server.url("/docs/guide")]
    assert "/guide" not in server.hits


@pytest.mark.asyncio()
async def test_failed_root_still_counts_as_the_only_run(serve_site, make_config):
    server = await serve_site({"/": b'{"not": "html"}'})

    async with SnapshotCrawler(make_config(server.base_url)) as crawler:
        with pytest.raises(SnapshotError):
            await crawler.crawl()
        with pytest.raises(RuntimeError):
            await crawler.crawl()

    assert server.hits == ["/"]


@pytest.mark.asyncio()
async def test_scan_reads_the_stored_artifact(serve_site, make_config, html_page):
    server = await serve_site({
        "/": html_page("/served"),
        "/served": html_page(title="served"),
        "/on-disk": html_page(title="on disk"),
    })

    def rewrite_root(page: StoredPage) -> None:
        # the queue carries the artifact path, so the scan sees this body
        if page.url == server.url("/"):
            page.path.write_text(html_page("/on-disk"), encoding="utf-8")

    result = await run_crawler(make_config(server.base_url, parallelism=1), on_stored=rewrite_root)

    assert [p.url for p in result.stored] == [server.url("/"), server.url("/on-disk")]
    assert "/served" not in server.hits
