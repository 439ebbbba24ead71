# File: site_snapshot/storage/encoder.py
"""URL → artifact path encoding.

Layout ("sibling marker")
-------------------------
Every page is stored as a *file* whose name is its last path segment prefixed
with ``_``; the preceding segments become directories::

    https://example.test/             -> example.test/_
    https://example.test/about        -> example.test/_about
    https://example.test/about/       -> example.test/about/_
    https://example.test/about/team   -> example.test/about/_team

File names always start with ``_`` and directory names never do: a directory
segment that is empty or already starts with ``_`` is prefixed with ``%``.
A canonical path never contains a bare ``%``, so the mapping stays injective
and a page can never clash with a directory needed by a deeper page.

The same functions serve both directions: the crawler uses
:func:`encode_path` to decide where to write, and the serve-back endpoint
runs request paths through :func:`canonical_path` and :func:`artifact_path`
to find the file again.
"""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import List, Sequence
from urllib.parse import quote, unquote_to_bytes, urlsplit

__all__: Sequence[str] = ("canonical_path", "escaped_path", "artifact_path", "encode_path")

# RFC 3986 pchar minus unreserved (always kept by quote) and "%".
_SEGMENT_SAFE = "!$&'()*+,;=:@"
_DIR_ESCAPE = "%"
_FILE_MARKER = "_"


def canonical_path(raw_path: str) -> str:
    """Return the canonical escaped form of a URL path.

    Dot segments are resolved and never climb above ``/``; each segment is
    decoded to bytes and re-quoted, so ``/%5Fa`` and ``/_a`` are one path while
    ``/a%2Fb`` stays distinct from ``/a/b``.
    """
    if not raw_path.startswith("/"):
        raw_path = "/" + raw_path
    parts = raw_path[1:].split("/")
    out: List[str] = []
    for index, segment in enumerate(parts):
        last = index == len(parts) - 1
        decoded = unquote_to_bytes(segment)
        if decoded in (b".", b".."):
            if decoded == b".." and out:
                out.pop()
            if last:
                out.append("")
            continue
        out.append(quote(decoded, safe=_SEGMENT_SAFE))
    return "/" + "/".join(out)


def escaped_path(url: str) -> str:
    """Visited key of *url*: its canonical path, without query or fragment."""
    return canonical_path(urlsplit(url).path)


def _dir_name(segment: str) -> str:
    if not segment or segment.startswith(_FILE_MARKER):
        return _DIR_ESCAPE + segment
    return segment


def artifact_path(path: str) -> PurePosixPath:
    """Relative location of the artifact for a canonical path."""
    *dirs, base = path[1:].split("/")
    return PurePosixPath(*(_dir_name(d) for d in dirs), _FILE_MARKER + base)


def encode_path(url: str) -> PurePosixPath:
    """``<hostname>/<artifact path>`` for *url*; the port is not part of the name."""
    hostname = urlsplit(url).hostname
    if not hostname:
        raise ValueError(f"URL has no host: {url!r}")
    return PurePosixPath(hostname) / artifact_path(escaped_path(url))
