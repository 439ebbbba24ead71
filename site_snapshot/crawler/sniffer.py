# site_snapshot/crawler/sniffer.py
"""
Content-type detection from the first bytes of a response body.

Signatures follow the WHATWG MIME Sniffing Standard (the same table most
HTTP stacks use), plus a JSON heuristic. Only the prefix is inspected.
"""
from __future__ import annotations

from typing import Sequence, Tuple

__all__: Sequence[str] = ("SNIFF_LEN", "detect_content_type", "is_html")

SNIFF_LEN = 512

_WHITESPACE = b"\t\n\x0c\r "

_HTML_SIGNATURES: Tuple[bytes, ...] = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

_EXACT_SIGNATURES: Tuple[Tuple[bytes, str], ...] = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", "text/plain; charset=utf-8"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"\x00asm", "application/wasm"),
    (b"OggS\x00", "application/ogg"),
)

# bytes that mark content as binary (WHATWG "binary data byte")
_BINARY_BYTES = frozenset(
    set(range(0x00, 0x09)) | {0x0B} | set(range(0x0E, 0x1B)) | set(range(0x1C, 0x20))
)


def _html_match(data: bytes) -> bool:
    upper = data[:16].upper()
    for sig in _HTML_SIGNATURES:
        if upper.startswith(sig) and len(data) > len(sig) and data[len(sig)] in b" >":
            return True
    return False


def detect_content_type(prefix: bytes) -> str:
    """Return the sniffed media type of *prefix*; never fails.

    An empty prefix is reported as plain text.
    """
    data = prefix[:SNIFF_LEN]
    stripped = data.lstrip(_WHITESPACE)

    if _html_match(stripped):
        return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    for sig, mime in _EXACT_SIGNATURES:
        if data.startswith(sig):
            return mime
    if data[:4] == b"RIFF" and data[8:14] == b"WEBPVP":
        return "image/webp"
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        return "audio/wave"
    if stripped[:1] in (b"{", b"["):
        return "application/json"
    if any(byte in _BINARY_BYTES for byte in data):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def is_html(content_type: str) -> bool:
    return content_type.split(";", 1)[0].strip().lower() == "text/html"
