# brewlog_backend/app/db/session.py

# [DB Session] Engine + helpers
from pathlib import Path

from sqlmodel import SQLModel, create_engine

def _ensure_sqlite_parent(db_url: str) -> None:
    # sqlite:///<path> needs its directory before the first connect
    prefix = "sqlite:///"
    if db_url.startswith(prefix) and db_url != "sqlite:///:memory:":
        Path(db_url[len(prefix):]).expanduser().parent.mkdir(parents=True, exist_ok=True)

def make_engine(db_url: str):
    _ensure_sqlite_parent(db_url)
    # SQLite needs check_same_thread=False if an embedding app hands the store to a worker
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    return create_engine(db_url, echo=False, connect_args=connect_args)

def init_db(engine) -> None:
    # Ensure table definitions are registered before create_all
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(engine)
