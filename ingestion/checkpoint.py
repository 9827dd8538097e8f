"""
Checkpoint management for the import.

Two tiers of state are kept:

- a durable key/value table (offset and historical watermark), written on
  setup and teardown only;
- a fast ephemeral counter of batches completed since the durable offset
  was loaded, bumped once per successful batch.

The offset a fresh batch reads from is always
initial_offset + counter * batch_size. On a crash the counter is lost and
the import resumes from the last durable offset: at worst the unflushed
batches are read again, never skipped.
"""

import asyncio
import logging
from typing import Dict, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.exceptions import CheckpointError
from models.base import ImportMechanism
from models.checkpoint import ImportState
from schemas.job import ImportCursor

logger = logging.getLogger(__name__)

OFFSET_KEY = "import_offset"
TOTAL_ROWS_KEY = "total_rows_snapshot"


class StateStorage:
    """Durable per-import key/value store backed by the import_state table"""

    def __init__(self, session_maker: async_sessionmaker, import_name: str):
        self.session_maker = session_maker
        self.import_name = import_name

    async def get(self, key: str, default: Optional[int] = None) -> Optional[int]:
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(ImportState.value).where(
                        ImportState.import_name == self.import_name,
                        ImportState.key == key
                    )
                )
                value = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CheckpointError(
                "Failed to read import state",
                context={"import_name": self.import_name, "key": key, "operation": "read"},
                original_exception=e
            )
        return default if value is None else int(value)

    async def set(self, key: str, value: int) -> None:
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(ImportState).where(
                        ImportState.import_name == self.import_name,
                        ImportState.key == key
                    )
                )
                state = result.scalar_one_or_none()
                if state is None:
                    state = ImportState(import_name=self.import_name, key=key)
                    session.add(state)
                state.value = int(value)
                await session.commit()
        except SQLAlchemyError as e:
            raise CheckpointError(
                "Failed to write import state",
                context={
                    "import_name": self.import_name,
                    "key": key,
                    "value": value,
                    "operation": "write"
                },
                original_exception=e
            )


class CounterStore(Protocol):
    async def get(self, key: str, default: int = 0) -> int:
        ...

    async def set(self, key: str, value: int) -> None:
        ...

    async def incr(self, key: str) -> int:
        ...


class MemoryCounterStore:
    """Process-local counter store; lost on restart"""

    def __init__(self):
        self._values: Dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str, default: int = 0) -> int:
        async with self._lock:
            return self._values.get(key, default)

    async def set(self, key: str, value: int) -> None:
        async with self._lock:
            self._values[key] = int(value)

    async def incr(self, key: str) -> int:
        async with self._lock:
            self._values[key] = self._values.get(key, 0) + 1
            return self._values[key]


class CheckpointStore:
    """
    Owns the import cursor.

    Attributes:
        storage: Durable state store
        counters: Ephemeral counter store
        batch_size: Rows per batch
        mode: Continuous or historical import
        initial_offset: Durable offset loaded at process start
        total_rows_snapshot: Historical watermark (None in continuous mode)
    """

    def __init__(
        self,
        storage: StateStorage,
        counters: CounterStore,
        batch_size: int,
        mode: ImportMechanism
    ):
        self.storage = storage
        self.counters = counters
        self.batch_size = batch_size
        self.mode = mode
        self.initial_offset: Optional[int] = None
        self.total_rows_snapshot: Optional[int] = None

    @property
    def is_historical(self) -> bool:
        return self.mode == ImportMechanism.HISTORICAL

    async def capture_total_rows_snapshot(self, row_count: int) -> Optional[int]:
        """
        Fix the historical watermark.

        The first successful startup stores the current row count; every
        later startup reuses the stored value. No-op in continuous mode.
        """
        if not self.is_historical:
            return None

        stored = await self.storage.get(TOTAL_ROWS_KEY)
        if stored is None:
            await self.storage.set(TOTAL_ROWS_KEY, row_count)
            logger.info(f"Captured historical row snapshot: {row_count} rows")
            self.total_rows_snapshot = int(row_count)
        else:
            logger.info(f"Reusing historical row snapshot: {stored} rows")
            self.total_rows_snapshot = stored
        return self.total_rows_snapshot

    async def load_initial_offset(self) -> int:
        """Load the durable offset and reset the ephemeral counter. Call once per process."""
        if self.initial_offset is not None:
            raise CheckpointError(
                "Initial offset already loaded",
                context={"import_name": self.storage.import_name, "operation": "read"}
            )
        offset = await self.storage.get(OFFSET_KEY, 0)
        self.initial_offset = int(offset)
        await self.counters.set(OFFSET_KEY, 0)
        logger.info(f"Resuming import from offset {self.initial_offset}")
        return self.initial_offset

    def _require_loaded(self) -> int:
        if self.initial_offset is None:
            raise CheckpointError(
                "Initial offset has not been loaded",
                context={"import_name": self.storage.import_name, "operation": "read"}
            )
        return self.initial_offset

    async def ephemeral_increment(self) -> int:
        """Record one more completed batch"""
        return await self.counters.incr(OFFSET_KEY)

    async def ephemeral_count(self) -> int:
        return await self.counters.get(OFFSET_KEY, 0)

    async def effective_offset(self) -> int:
        initial = self._require_loaded()
        return initial + await self.ephemeral_count() * self.batch_size

    async def persist(self, offset: int) -> int:
        """
        Durably store an offset, capped at the historical watermark.

        Returns:
            The offset actually written
        """
        offset_to_store = int(offset)
        if self.is_historical and self.total_rows_snapshot is not None:
            offset_to_store = min(offset_to_store, self.total_rows_snapshot)
        await self.storage.set(OFFSET_KEY, offset_to_store)
        logger.info(f"Persisted import offset {offset_to_store}")
        return offset_to_store

    async def cursor(self) -> ImportCursor:
        return ImportCursor(
            offset=await self.effective_offset(),
            total_rows_snapshot=self.total_rows_snapshot,
            mode=self.mode
        )
