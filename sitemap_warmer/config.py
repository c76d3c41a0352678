"""
Модуль для загрузки и валидации конфигурации прогрева SitemapWarmer.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
)


class WarmerConfig(BaseModel):
    """Конфигурация для одного прогона прогрева."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    sitemap_url: HttpUrl = Field(..., description="Корневой sitemap (обычно sitemap index).")
    concurrency: int = Field(100, ge=1, le=1000, description="Число параллельных воркеров.")
    limit: int = Field(0, ge=0, description="Макс. число документов (0 = без ограничения).")
    retry: bool = Field(True, description="Повторить упавшие запросы один раз после основного прохода.")
    notify: bool = Field(False, description="Пингануть поисковик после завершения.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field(
        "SitemapWarmer/0.1 (+cache warmup)", min_length=1, description="Заголовок User-Agent."
    )
    geo_header: str = Field("CDN-Country-Code", min_length=1, description="Заголовок гео-оверрайда CDN.")
    country_code: str = Field("US", min_length=1, description="Значение гео-заголовка.")
    ping_url: HttpUrl = Field(
        "https://www.google.com/ping",
        validate_default=True,
        description="Эндпоинт пинга sitemap поисковику."
    )
    include_alternates: bool = Field(True, description="Прогревать также alternate-ссылки.")
    sitemap_concurrency: int = Field(10, ge=1, description="Параллельная загрузка дочерних sitemap.")
    progress_every: int = Field(100, ge=1, description="Размер группы для логов прогресса.")
    seed: Optional[int] = Field(None, description="Seed перемешивания URL (для воспроизводимости).")
    fail_on_errors: bool = Field(False, description="Ненулевой код выхода при оставшихся ошибках.")

    @field_validator("country_code", mode="before")
    def _upper_country(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


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


def read_config_data(path: Union[str, Path, None]) -> dict[str, Any]:
    """
    Читает YAML или JSON и возвращает сырой словарь настроек.
    При отсутствии файла бросает FileNotFoundError.
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
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None]) -> WarmerConfig:
    """Читает YAML или JSON и возвращает проверенный объект WarmerConfig."""
    return WarmerConfig(**read_config_data(path))


def build_config(
    path: Union[str, Path, None],
    overrides: Optional[Mapping[str, Any]] = None,
) -> WarmerConfig:
    """
    Собирает конфиг для CLI: данные файла + непустые override-значения.

    Если путь не задан и configs/default.yaml отсутствует, конфиг строится
    только из overrides.
    """
    if path is None and not _DEFAULT_CFG.exists():
        data: dict[str, Any] = {}
    else:
        data = read_config_data(path)
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return WarmerConfig(**data)


__all__ = ["WarmerConfig", "load_config", "build_config", "read_config_data"]
