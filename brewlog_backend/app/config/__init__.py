# brewlog_backend/app/config/__init__.py
from __future__ import annotations

# Re-export config surface expected by callers across the app.

# Settings live in manifest.py
from .manifest import (
    ConfigError,
    Settings,
    load_settings,
    DEFAULT_STORAGE_KEY,
    DEFAULT_GRINDER,
)

# Path helpers live in paths.py
from .paths import (
    REPO_ROOT,
    get_data_dir,
    get_settings_file,
)

__all__ = [
    # manifest
    "ConfigError",
    "Settings",
    "load_settings",
    "DEFAULT_STORAGE_KEY",
    "DEFAULT_GRINDER",
    # paths
    "REPO_ROOT",
    "get_data_dir",
    "get_settings_file",
]
