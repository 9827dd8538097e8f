"""
Pytest configuration and fixtures
"""

import json
import re
import time
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from core.database import create_session_maker
from core.exceptions import QueryExecutionError
from models.base import Base
from schemas.config import ImportConfig

BASE_CONFIG = {
    "account": "acme-xy12345",
    "username": "loader",
    "password": "secret",
    "role": "LOADER",
    "database": "analytics",
    "schema": "public",
    "table": "events",
    "orderBy": "id",
    "warehouse": "COMPUTE_WH",
    "batchSize": "10",
    "frequency": "60",
    "transformationName": "default",
    "importMechanism": "Import continuously",
}


def make_rows(count: int, start: int = 0) -> List[Dict[str, Any]]:
    """Rows shaped for the default transformation"""
    return [
        {
            "id": i,
            "event": "click",
            "timestamp": "2023-01-01",
            "distinct_id": f"u{i}",
            "properties": json.dumps({"a": 1, "row": i}),
        }
        for i in range(start, start + count)
    ]


class FakeExecutor:
    """In-memory stand-in for the warehouse"""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None, failures: int = 0):
        self.rows = list(rows or [])
        self.failures = failures
        self.calls = []
        self.cleared = False

    @property
    def batch_offsets(self) -> List[int]:
        return [binds["offset"] for sql, binds in self.calls if "OFFSET" in sql]

    async def execute(self, sql_text, binds=None):
        binds = dict(binds or {})
        self.calls.append((sql_text, binds))

        if "COUNT(1)" in sql_text:
            return [{"ROW_COUNT": len(self.rows)}]

        if self.failures:
            self.failures -= 1
            raise QueryExecutionError(
                "Query execution failed",
                context={"sql_text": sql_text},
                original_exception=ConnectionError("network down")
            )

        limit = int(re.search(r"LIMIT (\d+)", sql_text).group(1))
        offset = binds["offset"]
        return [dict(row) for row in self.rows[offset:offset + limit]]

    async def clear(self):
        self.cleared = True


class RecordingSink:
    def __init__(self):
        self.captured = []
        self.closed = False

    async def capture(self, event_name, properties=None):
        self.captured.append((event_name, properties))

    async def close(self):
        self.closed = True


@pytest.fixture
def make_config():
    """Build a validated ImportConfig from the base mapping plus overrides"""
    def _make(attachments=None, **overrides):
        return ImportConfig.from_mapping({**BASE_CONFIG, **overrides}, attachments)
    return _make


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest_asyncio.fixture(scope="function")
async def state_engine():
    """In-memory state store with tables created"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def state_session_maker(state_engine):
    return create_session_maker(state_engine)


@pytest.fixture
def local_tz(monkeypatch):
    """Switch the process timezone, e.g. local_tz("IST-05:30")"""
    def _set(tz: str):
        monkeypatch.setenv("TZ", tz)
        time.tzset()

    yield _set

    monkeypatch.undo()
    time.tzset()


@pytest.fixture(name="make_rows")
def make_rows_fixture():
    return make_rows


@pytest.fixture
def make_executor():
    """FakeExecutor over default-shaped rows: make_executor(row_count, failures=0)"""
    def _make(row_count: int = 0, failures: int = 0, rows=None):
        return FakeExecutor(rows if rows is not None else make_rows(row_count), failures=failures)
    return _make
