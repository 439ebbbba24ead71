# File: site_snapshot/errors.py
"""site_snapshot.errors: единый тип ошибки для обработки одной страницы."""

from __future__ import annotations

from enum import Enum

__all__ = ["ErrorKind", "SnapshotError"]


class ErrorKind(str, Enum):
    """Категория сбоя при загрузке или сохранении страницы."""

    FETCH = "fetch-failure"
    CONTENT_TYPE = "bad-content-type"
    IO = "io-failure"
    PARSE = "parse-failure"


class SnapshotError(Exception):
    """Ошибка с категорией и URL страницы, на которой она возникла."""

    def __init__(self, kind: ErrorKind, url: str, reason: str) -> None:
        super().__init__(kind, url, reason)
        self.kind = kind
        self.url = url
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.reason}"
