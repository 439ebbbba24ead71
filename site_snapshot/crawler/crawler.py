# === FILE: site_snapshot/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import contextlib
import time
from enum import Enum
from typing import AsyncContextManager, Callable, Optional, Set

from aiohttp import ClientSession, ClientTimeout

from site_snapshot.config import SnapshotConfig
from site_snapshot.crawler.classifier import classify
from site_snapshot.crawler.fetcher import Fetcher
from site_snapshot.crawler.link_extractor import parse_links
from site_snapshot.crawler.models import CrawlResult, FailedPage, PageData, Site, StoredPage
from site_snapshot.crawler.visited import VisitedSet
from site_snapshot.errors import ErrorKind, SnapshotError
from site_snapshot.logger import logger
from site_snapshot.storage.encoder import escaped_path

__all__ = ("CrawlState", "SnapshotCrawler")

StoredCallback = Callable[[StoredPage], None]
FailedCallback = Callable[[str, SnapshotError], None]


class CrawlState(Enum):
    NOT_STARTED = "not-started"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


class SnapshotCrawler:
    """
    Асинхронный краулер снимка сайта.

    Корневая страница загружается первой; затем каждая сохранённая страница
    попадает в очередь на сканирование ссылок. В очереди лежит только путь к
    артефакту: тело читается с диска, когда до страницы доходит очередь.
    Ссылки одной страницы обрабатываются по порядку, разные страницы
    сканируются параллельно (не более ``parallelism`` одновременно). Обход
    заканчивается, когда очередь пуста и активных задач нет.
    """

    def __init__(
        self,
        config: SnapshotConfig,
        *,
        on_stored: Optional[StoredCallback] = None,
        on_failed: Optional[FailedCallback] = None,
    ) -> None:
        self.config = config
        self.root_url = str(config.site_url)
        self.site = Site.from_url(self.root_url)
        self.visited = VisitedSet()
        self.state = CrawlState.NOT_STARTED
        self.session: Optional[ClientSession] = None
        self._on_stored = on_stored
        self._on_failed = on_failed
        self._fetcher: Optional[Fetcher] = None
        self._limit: AsyncContextManager = (
            asyncio.Semaphore(config.parallelism) if config.parallelism else contextlib.nullcontext()
        )
        self._tasks: Set[asyncio.Task] = set()
        self._error: Optional[BaseException] = None

    async def __aenter__(self) -> SnapshotCrawler:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        self._fetcher = Fetcher(self.session, self.config.output_dir, self.config.sniff_bytes)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self) -> CrawlResult:
        if self._fetcher is None:
            raise RuntimeError("Session not initialized")
        if self.state is not CrawlState.NOT_STARTED:
            raise RuntimeError("crawl() can only run once per crawler")

        self.state = CrawlState.RUNNING
        logger.info("Старт обхода: %s", self.root_url)
        start = time.monotonic()
        result = CrawlResult(site=self.site)

        # the root bypasses classification; its failure is fatal
        self.visited.check_and_mark(escaped_path(self.root_url))
        root = await self._fetcher.fetch_and_store(self.root_url)

        queue: asyncio.Queue[StoredPage] = asyncio.Queue()
        queue.put_nowait(self._stored(result, root))
        dispatcher = asyncio.create_task(self._dispatch(queue, result))
        try:
            await queue.join()
        finally:
            self.state = CrawlState.DRAINING
            dispatcher.cancel()
            await asyncio.gather(dispatcher, *self._tasks, return_exceptions=True)

        if self._error is not None:
            raise self._error
        self.state = CrawlState.DONE
        result.duration = time.monotonic() - start
        logger.info(
            "Завершено: %d страниц сохранено, %d ошибок за %.2f с",
            len(result.stored), len(result.failures), result.duration,
        )
        return result

    async def _dispatch(self, queue: asyncio.Queue[StoredPage], result: CrawlResult) -> None:
        while True:
            page = await queue.get()
            task = asyncio.create_task(self._visit(page, queue, result))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _visit(self, page: StoredPage, queue: asyncio.Queue[StoredPage], result: CrawlResult) -> None:
        try:
            async with self._limit:
                try:
                    body = await asyncio.to_thread(page.path.read_bytes)
                except OSError as exc:
                    self._failed(result, SnapshotError(ErrorKind.IO, page.url, f"cannot read artifact: {exc}"))
                    return
                await self._scan(PageData(url=page.url, content=body, path=page.path), queue, result)
        except Exception as exc:
            logger.exception("Unexpected error while scanning %s", page.url)
            if self._error is None:
                self._error = exc
        finally:
            queue.task_done()

    async def _scan(self, page: PageData, queue: asyncio.Queue[StoredPage], result: CrawlResult) -> None:
        assert self._fetcher is not None
        base, links = parse_links(page.content, page.url)
        for raw in links:
            url, in_scope = classify(raw, base, self.site)
            if url is None or not in_scope:
                continue
            if self.visited.check_and_mark(escaped_path(url)):
                continue
            try:
                stored = await self._fetcher.fetch_and_store(url)
            except SnapshotError as exc:
                self._failed(result, exc)
                continue
            await queue.put(self._stored(result, stored))

    def _stored(self, result: CrawlResult, page: PageData) -> StoredPage:
        entry = StoredPage(url=page.url, path=page.path)
        result.stored.append(entry)
        if self._on_stored is not None:
            self._on_stored(entry)
        return entry

    def _failed(self, result: CrawlResult, exc: SnapshotError) -> None:
        logger.warning("Skipping %s: %s", exc.url, exc)
        result.failures.append(FailedPage(url=exc.url, kind=exc.kind, reason=exc.reason))
        if self._on_failed is not None:
            self._on_failed(exc.url, exc)
