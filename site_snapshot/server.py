# File: site_snapshot/server.py
"""site_snapshot.server: раздача сохранённого снимка по HTTP.

Путь запроса проходит через тот же кодировщик, что и при записи, поэтому
``/about`` находит ``<hostname>/_about``, а ``/`` находит ``<hostname>/_``.
"""

from __future__ import annotations

from pathlib import Path

from aiohttp import web

from site_snapshot.config import SnapshotConfig
from site_snapshot.crawler.models import Site
from site_snapshot.logger import logger
from site_snapshot.storage.encoder import artifact_path, canonical_path

__all__ = ["create_app", "serve_snapshot"]

_SNAPSHOT_DIR = web.AppKey("snapshot_dir", Path)


async def _serve_artifact(request: web.Request) -> web.StreamResponse:
    root = request.app[_SNAPSHOT_DIR]
    target = root / artifact_path(canonical_path(request.rel_url.raw_path))
    if not target.is_file():
        logger.debug("Not in snapshot: %s", request.rel_url)
        raise web.HTTPNotFound()
    return web.FileResponse(target, headers={"Content-Type": "text/html; charset=utf-8"})


def create_app(snapshot_dir: Path | str) -> web.Application:
    """Приложение, отдающее артефакты из snapshot_dir (каталог <hostname>)."""
    app = web.Application()
    app[_SNAPSHOT_DIR] = Path(snapshot_dir)
    app.router.add_get("/{tail:.*}", _serve_artifact)
    return app


def serve_snapshot(cfg: SnapshotConfig) -> None:
    """Блокирующий запуск сервера для снимка сайта из cfg."""
    snapshot_dir = Path(cfg.output_dir) / Site.from_url(str(cfg.site_url)).hostname
    logger.info("Serving %s at http://%s:%d", snapshot_dir, cfg.serve_host, cfg.serve_port)
    web.run_app(create_app(snapshot_dir), host=cfg.serve_host, port=cfg.serve_port, print=None)
