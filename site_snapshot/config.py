# === FILE: site_snapshot/config.py ===
"""
Модуль для загрузки и валидации конфигурации SiteSnapshot.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class SnapshotConfig(BaseModel):
    """Конфигурация для одного запуска снимка сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    site_url: HttpUrl = Field(..., description="Корневой URL сайта.")
    output_dir: Path = Field(Path("."), description="Каталог, в котором создаётся дерево <hostname>/.")
    parallelism: Optional[int] = Field(
        None, ge=1, description="Макс. число одновременно сканируемых страниц (None = без ограничений)."
    )
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("SiteSnapshot/0.1", min_length=1, description="Заголовок User-Agent.")
    sniff_bytes: int = Field(512, ge=512, description="Сколько байт читать для определения типа содержимого.")
    serve_host: str = Field("localhost", min_length=1, description="Адрес для режима раздачи снимка.")
    serve_port: int = Field(7000, ge=1, le=65535, description="Порт для режима раздачи снимка.")


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def _read_file(path_obj: Path) -> dict[str, Any]:
    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> SnapshotConfig:
    """
    Читает YAML или JSON, накладывает overrides и возвращает проверенный SnapshotConfig.

    Без path используется configs/default.yaml, если он существует.
    Переопределения со значением None игнорируются (удобно для опций CLI).
    """
    data: dict[str, Any] = {}
    if path is None:
        if _DEFAULT_CFG.is_file():
            data = _read_file(_DEFAULT_CFG)
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
        data = _read_file(path_obj)

    data.update({key: value for key, value in overrides.items() if value is not None})
    return SnapshotConfig(**data)


__all__ = ["SnapshotConfig", "load_config"]
