"""
Query execution against the source warehouse.

The executor owns a connection pool sized for exactly one connection, so
no two statements ever run concurrently. Driver calls are blocking and run
in a worker thread; callers only ever see rows or a QueryExecutionError.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from core.exceptions import QueryExecutionError
from schemas.config import ImportConfig

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class QueryExecutor(Protocol):
    async def execute(self, sql_text: str, binds: Optional[Mapping[str, Any]] = None) -> List[Row]:
        ...

    async def clear(self) -> None:
        ...


def build_snowflake_url(config: ImportConfig) -> URL:
    """Connection URL for the snowflake-sqlalchemy dialect"""
    return URL.create(
        "snowflake",
        username=config.username,
        password=config.password,
        host=config.account,
        database=f"{config.database.upper()}/{config.schema_name.upper()}",
        query={"warehouse": config.warehouse, "role": config.role},
    )


class SnowflakeQueryExecutor:
    """
    Serialized, single-connection query executor.

    Attributes:
        engine: SQLAlchemy engine whose pool never hands out more than one connection
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: ImportConfig) -> "SnowflakeQueryExecutor":
        logger.info(f"Creating Snowflake connection pool for account {config.account}")
        engine = create_engine(
            build_snowflake_url(config),
            poolclass=QueuePool,
            pool_size=1,
            max_overflow=0,
            pool_pre_ping=True,
        )
        return cls(engine)

    def _execute_blocking(self, sql_text: str, binds: Mapping[str, Any]) -> List[Row]:
        with self.engine.connect() as connection:
            result = connection.execute(text(sql_text), dict(binds))
            if not result.returns_rows:
                return []
            return [dict(row._mapping) for row in result]

    async def execute(self, sql_text: str, binds: Optional[Mapping[str, Any]] = None) -> List[Row]:
        """
        Run one parameterized statement and return its rows.

        Raises:
            QueryExecutionError: For any driver or connectivity failure
        """
        binds = binds or {}
        async with self._lock:
            try:
                return await asyncio.to_thread(self._execute_blocking, sql_text, binds)
            except SQLAlchemyError as e:
                logger.error(f"Error executing Snowflake query: {sql_text.strip()} ({e})")
                raise QueryExecutionError(
                    "Query execution failed",
                    context={"sql_text": sql_text.strip(), "binds": dict(binds)},
                    original_exception=e
                )

    async def clear(self) -> None:
        """Release every pooled connection"""
        async with self._lock:
            await asyncio.to_thread(self.engine.dispose)
        logger.info("Snowflake connection pool cleared")
