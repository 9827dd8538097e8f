"""
SQLAlchemy ORM models for the durable state store.

Models:
    base: Base declarative class and shared enums (ImportMechanism, JobState)
    checkpoint: Per-import key/value state (offset, row-count watermark)

Usage:
    from models import ImportState
    from models.base import ImportMechanism, JobState

Example:
    state = ImportState(import_name="snowflake_import", key="import_offset", value=0)
    session.add(state)
    await session.commit()
"""

from models.base import Base, ImportMechanism, JobState
from models.checkpoint import ImportState

__all__ = [
    "Base",
    "ImportMechanism",
    "JobState",
    "ImportState",
]
