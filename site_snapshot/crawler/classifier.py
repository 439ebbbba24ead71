# site_snapshot/crawler/classifier.py
"""
Resolution and scope check for links discovered on a page.
"""
from __future__ import annotations

from typing import NamedTuple, Optional
from urllib.parse import urldefrag, urljoin, urlsplit

from site_snapshot.crawler.models import Site, host_of

__all__ = ("Classification", "classify")


class Classification(NamedTuple):
    url: Optional[str]
    in_scope: bool


_UNUSABLE = Classification(None, False)


def classify(link_text: str, page_url: str, site: Site) -> Classification:
    """
    Resolve *link_text* against *page_url* and decide whether it belongs to *site*.

    Empty, fragment-only, malformed and non-http(s) links come back as
    ``Classification(None, False)``. Only the host is compared with the site,
    so an http link to an https site is still in scope.
    """
    raw = (link_text or "").strip()
    if not raw or raw.startswith("#"):
        return _UNUSABLE
    try:
        resolved, _ = urldefrag(urljoin(page_url, raw))
        parts = urlsplit(resolved)
        host = host_of(parts)
    except ValueError:
        return _UNUSABLE
    if parts.scheme not in ("http", "https") or host is None:
        return _UNUSABLE
    return Classification(resolved, host == site.host)
