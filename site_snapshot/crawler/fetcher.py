# site_snapshot/crawler/fetcher.py
"""
Fetcher module: downloads a page, checks that it is HTML and stores it.
"""
from __future__ import annotations

import asyncio
from pathlib import Path

from aiohttp import ClientError, ClientSession, StreamReader
from site_snapshot.crawler.models import PageData
from site_snapshot.crawler.sniffer import SNIFF_LEN, detect_content_type, is_html
from site_snapshot.errors import ErrorKind, SnapshotError
from site_snapshot.logger import logger
from site_snapshot.storage.encoder import encode_path
from site_snapshot.storage.writer import write_artifact


class Fetcher:
    """Fetches a URL once and persists the body under *output_dir*."""

    def __init__(
        self,
        session: ClientSession,
        output_dir: Path,
        sniff_bytes: int = SNIFF_LEN,
    ) -> None:
        self.session = session
        self.output_dir = Path(output_dir)
        self.sniff_bytes = max(sniff_bytes, SNIFF_LEN)

    async def fetch_and_store(self, url: str) -> PageData:
        """
        GET *url*, sniff its first bytes and write the whole body to disk.

        Raises SnapshotError: FETCH for transport errors, timeouts and non-2xx
        statuses, CONTENT_TYPE when the body is not HTML (nothing is written),
        IO when the artifact cannot be written.
        """
        try:
            async with self.session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise SnapshotError(ErrorKind.FETCH, url, f"unexpected status {resp.status}")
                prefix = await self._read_prefix(resp.content)
                content_type = detect_content_type(prefix)
                if not is_html(content_type):
                    raise SnapshotError(ErrorKind.CONTENT_TYPE, url, f"wrong content-type: {content_type}")
                body = prefix + await resp.content.read()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise SnapshotError(ErrorKind.FETCH, url, str(exc) or type(exc).__name__) from exc

        target = self.output_dir / encode_path(url)
        try:
            await asyncio.to_thread(write_artifact, target, body)
        except OSError as exc:
            raise SnapshotError(ErrorKind.IO, url, str(exc)) from exc
        logger.debug("Fetched %s (%d bytes) -> %s", url, len(body), target)
        return PageData(url=url, content=body, path=target)

    async def _read_prefix(self, stream: StreamReader) -> bytes:
        buf = bytearray()
        while len(buf) < self.sniff_bytes:
            chunk = await stream.read(self.sniff_bytes - len(buf))
            if not chunk:
                break
            buf.extend(chunk)
        return bytes(buf)
