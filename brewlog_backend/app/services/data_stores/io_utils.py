# brewlog_backend/app/services/data_stores/io_utils.py
from __future__ import annotations

import json, os, tempfile
from pathlib import Path
from typing import Any

from brewlog_backend.app.utils.log import get_logger

log = get_logger("io")

def atomic_write(path: Path, text: str) -> None:
    """
    Atomic text write: temp file in the same directory, then os.replace.
    A crash mid-write leaves the previous file intact.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tf = tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding="utf-8")
    tmp = Path(tf.name)
    try:
        with tf:
            tf.write(text)
        os.replace(tmp, path)
    except Exception:
        # no stray temp files, whether the write, flush or replace failed
        tmp.unlink(missing_ok=True)
        raise

def read_json(path: Path, default: Any):
    """
    Safe JSON reader. Returns `default` if missing, empty or invalid.
    """
    if not path.exists():
        return default
    try:
        raw = path.read_text(encoding="utf-8")
        return json.loads(raw) if raw.strip() else default
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning("unreadable JSON at %s (%s); using default", path, e)
        return default

def write_json(path: Path, obj: Any) -> None:
    atomic_write(path, json.dumps(obj, ensure_ascii=False, indent=2))
