# File: site_snapshot/engine.py
"""site_snapshot.engine: обёртка для запуска обхода из CLI и тестов."""

from __future__ import annotations

from typing import Optional

from site_snapshot.config import SnapshotConfig
from site_snapshot.crawler.crawler import FailedCallback, SnapshotCrawler, StoredCallback
from site_snapshot.crawler.models import CrawlResult

__all__ = ["start_snapshot"]


async def start_snapshot(
    cfg: SnapshotConfig,
    *,
    on_stored: Optional[StoredCallback] = None,
    on_failed: Optional[FailedCallback] = None,
) -> CrawlResult:
    """
    Запускает SnapshotCrawler в контексте и возвращает CrawlResult.

    Parameters
    ----------
    cfg : SnapshotConfig
        Конфигурация обхода.
    on_stored, on_failed
        Вызываются по мере сохранения страницы или отказа от неё.
    """
    async with SnapshotCrawler(cfg, on_stored=on_stored, on_failed=on_failed) as crawler:
        return await crawler.crawl()
