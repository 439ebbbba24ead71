"""site_snapshot.crawler: обход сайта, загрузка и сохранение страниц."""

from site_snapshot.crawler.crawler import CrawlState, SnapshotCrawler
from site_snapshot.crawler.models import CrawlResult, FailedPage, PageData, Site, StoredPage

__all__ = ["CrawlResult", "CrawlState", "FailedPage", "PageData", "Site", "SnapshotCrawler", "StoredPage"]
