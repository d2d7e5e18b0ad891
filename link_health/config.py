"""
Модуль для загрузки и валидации конфигурации link_health.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from link_health.crawler.normalizer import normalize

DEFAULT_USER_AGENT = "Simple_Link_Health_BOT"


class CrawlConfig(BaseModel):
    """Конфигурация одного обхода сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: str = Field(..., description="Стартовый URL (http или https).")
    max_depth: int = Field(2, ge=0, description="Максимальная глубина обхода ссылок.")
    parallelism: int = Field(4, ge=1, description="Число параллельных запросов на хост.")
    jitter: float = Field(1.0, ge=0, description="Верхняя граница случайной задержки перед запросом (секунд).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    crawl_timeout: Optional[float] = Field(None, gt=0, description="Таймаут всего обхода (секунд).")

    @field_validator("seed_url", mode="before")
    def normalize_seed(cls, v: Any) -> Any:
        if isinstance(v, str):
            # InvalidURLError -> ValidationError
            return normalize(v)
        return v


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


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Читает YAML или JSON файл и возвращает сырой словарь настроек."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path]) -> CrawlConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlConfig.
    При отсутствии файла бросает FileNotFoundError.
    """
    return CrawlConfig(**read_config_file(path))


def resolve_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlConfig:
    """
    Собирает конфигурацию: значения из файла (если задан), поверх них
    переданные явно параметры. ``None`` означает «не задано».
    """
    data: dict[str, Any] = read_config_file(path) if path is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    return CrawlConfig(**data)
