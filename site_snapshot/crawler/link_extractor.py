# site_snapshot/crawler/link_extractor.py
"""
Link extraction for SiteSnapshot.
"""
from __future__ import annotations

from typing import Dict, List, NamedTuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag
from site_snapshot.crawler.models import PageData

#: tag -> attribute holding the link
LINK_ATTRIBUTES: Dict[str, str] = {
    "a": "href",
    "link": "href",
    "img": "src",
    "script": "src",
}


class PageLinks(NamedTuple):
    """Raw link values of a document and the URL they are relative to."""

    base: str
    links: List[str]


def _document_base(soup: BeautifulSoup, page_url: str) -> str:
    # only the first <base href> counts
    tag = soup.find("base", href=True)
    if not isinstance(tag, Tag):
        return page_url
    href = tag.get("href")
    if not isinstance(href, str) or not href.strip():
        return page_url
    try:
        return urljoin(page_url, href.strip())
    except ValueError:
        return page_url


def parse_links(content: bytes, page_url: str) -> PageLinks:
    """
    Parse *content* once: the document base (``<base href>`` resolved against
    *page_url*, or *page_url* itself) and raw link values in document order.

    Values are stripped but not resolved; elements without the attribute or
    with an empty one are skipped.
    """
    soup = BeautifulSoup(content, "html.parser")
    links: List[str] = []
    for tag in soup.find_all(list(LINK_ATTRIBUTES)):
        if not isinstance(tag, Tag):
            continue
        value = tag.get(LINK_ATTRIBUTES[tag.name])
        if not isinstance(value, str):
            continue
        raw = value.strip()
        if raw:
            links.append(raw)
    return PageLinks(_document_base(soup, page_url), links)


def extract_links(page: PageData) -> List[str]:
    """Return raw link values from PageData content, in document order."""
    return parse_links(page.content, page.url).links
