# site_snapshot/crawler/models.py
"""
Data models for the SiteSnapshot crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from urllib.parse import SplitResult, urlsplit, urlunsplit

from site_snapshot.errors import ErrorKind, SnapshotError


def host_of(parts: SplitResult) -> Optional[str]:
    """Return ``hostname[:port]`` for comparison, or None when the authority is unusable.

    Userinfo is dropped and the hostname is lower-cased. Raises ValueError on an
    invalid port, like :attr:`SplitResult.port` itself.
    """
    hostname = parts.hostname
    if not hostname:
        return None
    if ":" in hostname:
        hostname = f"[{hostname}]"
    port = parts.port
    return hostname if port is None else f"{hostname}:{port}"


@dataclass(frozen=True, slots=True)
class Site:
    """Root of a crawl. Immutable; its host is the scope boundary."""

    scheme: str
    host: str
    path: str

    @classmethod
    def from_url(cls, url: str) -> Site:
        try:
            parts = urlsplit(url.strip())
            host = host_of(parts)
        except ValueError as exc:
            raise SnapshotError(ErrorKind.PARSE, url, str(exc)) from exc
        if parts.scheme not in ("http", "https") or host is None:
            raise SnapshotError(ErrorKind.PARSE, url, "expected an absolute http(s) URL")
        return cls(scheme=parts.scheme, host=host, path=parts.path or "/")

    @property
    def hostname(self) -> str:
        """Host without port; names the snapshot directory."""
        return urlsplit(self.url).hostname or ""

    @property
    def url(self) -> str:
        return urlunsplit((self.scheme, self.host, self.path, "", ""))


@dataclass(slots=True)
class PageData:
    """A fetched and stored page: its URL, raw body and artifact location."""

    url: str
    content: bytes
    path: Path


@dataclass(slots=True)
class StoredPage:
    url: str
    path: Path


@dataclass(slots=True)
class FailedPage:
    url: str
    kind: ErrorKind
    reason: str


@dataclass(slots=True)
class CrawlResult:
    """Outcome of one crawl, in completion order."""

    site: Site
    stored: List[StoredPage] = field(default_factory=list)
    failures: List[FailedPage] = field(default_factory=list)
    duration: float = 0.0
