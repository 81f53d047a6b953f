from __future__ import annotations

"""
Central path resolution for the brew log backend.

Env overrides:
    DATA_DIR
    BREWLOG_SETTINGS

Defaults:
    <repo_root>/data
    <DATA_DIR>/settings.yaml

DATA_DIR is read on every call so tests (and embedding apps) can point it
somewhere else after import.
"""

import os
from pathlib import Path

# ──────────────────────────────────────────────────────────────────────────────
_THIS_FILE = Path(__file__).resolve()

def _resolve_repo_root() -> Path:
    p = _THIS_FILE
    for _ in range(6):
        if (p.parent / "brewlog_backend" / "app").exists():
            return p.parent
        p = p.parent
    return _THIS_FILE.parents[3]

REPO_ROOT: Path = _resolve_repo_root()

def _clean_env(value: str | None) -> str | None:
    if value is None:
        return None
    v = value.strip().strip('"').strip("'")
    return v or None

def _env_path(name: str) -> Path | None:
    raw = _clean_env(os.getenv(name))
    if not raw:
        return None
    return Path(raw).expanduser().resolve()

_default_data = REPO_ROOT / "data"

# ── Getters
def get_data_dir() -> Path:
    return (_env_path("DATA_DIR") or _default_data).resolve()

def get_settings_file() -> Path:
    return _env_path("BREWLOG_SETTINGS") or (get_data_dir() / "settings.yaml")

__all__ = ["REPO_ROOT", "get_data_dir", "get_settings_file"]
