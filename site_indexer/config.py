# File: site_indexer/config.py
"""
Модуль для загрузки и валидации конфигурации индексатора SiteIndexer.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

MAX_DEPTH = 10
FETCH_TIMEOUT = 15.0


class SiteConfig(BaseModel):
    """Один сайт из списка индексации: отображаемое имя и корневой URL."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, description="Отображаемое имя сайта.")
    url: str = Field(..., description="Корневой URL сайта (http/https).")

    @field_validator("url", mode="before")
    def _check_url(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        v = v.strip()
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError(f"URL сайта должен начинаться с http:// или https://: {v!r}")
        return v.rstrip("/")


class IndexerConfig(BaseModel):
    """Конфигурация одного процесса индексации."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    sites: List[SiteConfig] = Field(..., description="Список сайтов (дубликаты допустимы).")
    max_depth: int = Field(MAX_DEPTH, ge=0, description="Максимальная глубина обхода ссылок.")
    timeout: float = Field(FETCH_TIMEOUT, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("SiteIndexerBot/1.0", min_length=1, description="Заголовок User-Agent.")
    concurrency: int = Field(
        default_factory=lambda: os.cpu_count() or 1,
        ge=1,
        description="Число одновременных загрузок в рамках одного сайта.",
    )
    database: Path = Field(Path("site_indexer.db"), description="Файл базы SQLite.")
    download_dir: Optional[Path] = Field(
        None, description="Каталог для сохранения файлов (PDF, изображения); None, чтобы не сохранять."
    )
    host: str = Field("127.0.0.1", description="Адрес HTTP-интерфейса.")
    port: int = Field(8080, ge=1, le=65535, description="Порт HTTP-интерфейса.")


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


def load_config(path: Union[str, Path, None]) -> IndexerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект IndexerConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return IndexerConfig(**data)
    except ValidationError:
        raise


__all__ = ["IndexerConfig", "SiteConfig", "load_config", "MAX_DEPTH", "FETCH_TIMEOUT"]
