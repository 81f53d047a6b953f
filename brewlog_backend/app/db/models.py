# models.py  (flat key-value table backing the sqlite store)

from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field


# ---------- Key-value ----------

class KeyValueEntry(SQLModel, table=True):
    __tablename__ = "kv_entry"

    key: str = Field(primary_key=True)
    value: str                                      # opaque blob (JSON text)
    updated_at: Optional[datetime] = Field(default_factory=lambda: datetime.now(timezone.utc))
