# File: site_snapshot/storage/writer.py
"""site_snapshot.storage.writer: запись артефакта страницы на диск."""

from __future__ import annotations

import os
from pathlib import Path

from site_snapshot.logger import logger

DIR_MODE = 0o755
FILE_MODE = 0o644


def write_artifact(target: Path, body: bytes) -> Path:
    """Создаёт цепочку каталогов (идемпотентно) и записывает body в target."""
    target.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    with os.fdopen(fd, "wb") as fh:
        fh.write(body)
    logger.debug("Stored %d bytes at %s", len(body), target)
    return target


__all__ = ["DIR_MODE", "FILE_MODE", "write_artifact"]
