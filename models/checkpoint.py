from sqlalchemy import Column, Integer, String, DateTime, BigInteger, Index
from datetime import datetime, timezone
from models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ImportState(Base):
    """
    Durable key/value state for an import.

    Purpose:
    - Resume the import from the last persisted offset after a restart
    - Keep the historical row-count watermark stable across restarts

    Design:
    - One row per (import, key)
    - Keys in use: "import_offset", "total_rows_snapshot"
    - Written on setup (snapshot) and on teardown (offset), never per batch
    """
    __tablename__ = "import_state"

    id = Column(Integer, primary_key=True, autoincrement=True)

    import_name = Column(String(100), nullable=False)
    key = Column(String(100), nullable=False)
    value = Column(BigInteger, nullable=True)

    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("idx_import_state_key", "import_name", "key", unique=True),
    )
