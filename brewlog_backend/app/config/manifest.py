# brewlog_backend/app/config/manifest.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from brewlog_backend.app.utils.log import get_logger
from .paths import get_data_dir, get_settings_file

log = get_logger("config")

DEFAULT_STORAGE_KEY = "brewLogsData"
DEFAULT_GRINDER = "Fellow Ode"


class ConfigError(RuntimeError):
    """Raised when settings cannot be loaded."""


class Settings(BaseModel):
    store_backend: Literal["json", "sqlite", "memory"] = "json"
    data_file: Optional[Path] = None
    db_url: Optional[str] = None
    storage_key: str = DEFAULT_STORAGE_KEY
    seed_samples: bool = False
    default_grinder: str = DEFAULT_GRINDER
    require_water_amount: bool = True
    log_level: str = "INFO"

    model_config = ConfigDict(extra="forbid")

    def resolved_data_file(self) -> Path:
        return (self.data_file or (get_data_dir() / "brewlog.json")).expanduser().resolve()

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url
        return f"sqlite:///{(get_data_dir() / 'brewlog.sqlite3').resolve()}"


# env name -> settings field
_ENV_KEYS: Dict[str, str] = {
    "BREWLOG_STORE_BACKEND": "store_backend",
    "BREWLOG_DATA_FILE": "data_file",
    "BREWLOG_DB_URL": "db_url",
    "BREWLOG_STORAGE_KEY": "storage_key",
    "BREWLOG_SEED_SAMPLES": "seed_samples",
    "BREWLOG_DEFAULT_GRINDER": "default_grinder",
    "BREWLOG_REQUIRE_WATER_AMOUNT": "require_water_amount",
    "BREWLOG_LOG_LEVEL": "log_level",
}

def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ConfigError(f"Settings file must hold a mapping: {path}")
    return obj

def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for env_name, field in _ENV_KEYS.items():
        raw = os.getenv(env_name)
        if raw is None or not raw.strip():
            continue
        out[field] = raw.strip()
    return out

def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Defaults, then the YAML settings file (if present), then BREWLOG_* env vars.
    """
    settings_path = Path(path) if path is not None else get_settings_file()
    values: Dict[str, Any] = {}
    if settings_path.exists():
        values.update(_read_yaml(settings_path))
        log.info("[settings] loaded %s", settings_path)
    elif path is not None:
        raise ConfigError(f"Settings path does not exist: {settings_path}")
    values.update(_env_overrides())
    try:
        return Settings(**values)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


__all__ = ["ConfigError", "Settings", "load_settings", "DEFAULT_STORAGE_KEY", "DEFAULT_GRINDER"]
