# brewlog_backend/app/utils/log.py
from __future__ import annotations

import logging

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

def get_logger(name: str) -> logging.Logger:
    """
    Named logger under the "brewlog." namespace with one stream handler.
    A handler is only attached once, so repeated calls are cheap.
    """
    full = name if name.startswith("brewlog") else f"brewlog.{name}"
    log = logging.getLogger(full)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
        log.addHandler(handler)
        log.setLevel(logging.INFO)
    return log

def set_level(log: logging.Logger, level: str | int) -> None:
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    log.setLevel(level)
