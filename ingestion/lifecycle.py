"""
Setup and teardown of an import.

setup_import validates everything that can be validated before the first
batch (config, transformation attachments, connectivity, row count) and
fixes the starting cursor. teardown_import writes the cursor back durably
and then releases the warehouse connection.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.config import Settings
from core.exceptions import CheckpointError, ConfigurationError, QueryExecutionError
from ingestion.checkpoint import CheckpointStore, CounterStore, MemoryCounterStore, StateStorage
from ingestion.context import ImportContext
from ingestion.query_executor import QueryExecutor, SnowflakeQueryExecutor
from ingestion.sinks import EventSink, HttpCaptureSink, LoggingSink
from ingestion.sql import build_row_count_query
from ingestion.transformers import get_transformation
from schemas.config import ImportConfig

logger = logging.getLogger(__name__)


def load_import_config_file(path: str) -> ImportConfig:
    """
    Read an import config file.

    Layout:
        {
            "config": {"account": "...", "table": "...", ...},
            "attachments": {"rowToEventMap": "mappings/events.json"}
        }

    Attachment paths are resolved relative to the config file.
    """
    config_path = Path(path)
    try:
        document = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(
            "Unable to read import config file",
            context={"path": str(config_path)},
            original_exception=e
        )

    attachments = {}
    for name, attachment_path in (document.get("attachments") or {}).items():
        resolved = config_path.parent / attachment_path
        try:
            attachments[name] = resolved.read_bytes()
        except OSError as e:
            raise ConfigurationError(
                f"Unable to read attachment {name}",
                context={"attachment": name, "path": str(resolved)},
                original_exception=e
            )

    return ImportConfig.from_mapping(document.get("config") or {}, attachments)


def build_sink(settings: Settings) -> EventSink:
    if settings.CAPTURE_API_KEY:
        return HttpCaptureSink(
            host=settings.CAPTURE_HOST,
            api_key=settings.CAPTURE_API_KEY,
            timeout=settings.CAPTURE_TIMEOUT_SECONDS
        )
    logger.warning("CAPTURE_API_KEY is not set; events will only be logged")
    return LoggingSink()


async def _release(executor: QueryExecutor, sink: EventSink):
    try:
        await executor.clear()
    finally:
        await sink.close()


async def setup_import(
    config: ImportConfig,
    session_maker: async_sessionmaker,
    import_name: str,
    executor: Optional[QueryExecutor] = None,
    counters: Optional[CounterStore] = None,
    sink: Optional[EventSink] = None,
    max_attempts: int = 15,
    retry_base_delay: int = 3
) -> ImportContext:
    """
    Prepare an import for scheduling.

    Raises:
        ConfigurationError: If the transformation cannot be built
        QueryExecutionError: If the source table cannot be counted
        CheckpointError: If the state store cannot be read
    """
    logger.info(f"Spinning up import {import_name} ({config.import_mechanism.value})")

    transformation = get_transformation(config)
    executor = executor or SnowflakeQueryExecutor.from_config(config)
    sink = sink or LoggingSink()

    try:
        rows = await executor.execute(build_row_count_query(config.table))
    except QueryExecutionError as e:
        logger.error(f"Row count query failed: {e.message}", extra={"error_context": e.to_dict()})
        await _release(executor, sink)
        raise

    total_rows = int(next(iter(rows[0].values()))) if rows else 0
    logger.info(f"{total_rows} total rows found in {config.table}")

    checkpoints = CheckpointStore(
        storage=StateStorage(session_maker, import_name),
        counters=counters or MemoryCounterStore(),
        batch_size=config.batch_size,
        mode=config.import_mechanism
    )
    try:
        await checkpoints.capture_total_rows_snapshot(total_rows)
        await checkpoints.load_initial_offset()
    except CheckpointError as e:
        logger.error(f"Unable to load import state: {e.message}", extra={"error_context": e.to_dict()})
        await _release(executor, sink)
        raise

    return ImportContext(
        config=config,
        executor=executor,
        checkpoints=checkpoints,
        transformation=transformation,
        sink=sink,
        max_attempts=max_attempts,
        retry_base_delay=retry_base_delay
    )


async def teardown_import(context: ImportContext) -> int:
    """
    Persist the cursor, then release resources.

    Returns:
        The offset written to the state store

    Raises:
        CheckpointError: If the offset could not be persisted (resources are still released)
    """
    try:
        offset = await context.checkpoints.effective_offset()
        stored = await context.checkpoints.persist(offset)
    finally:
        await _release(context.executor, context.sink)
    logger.info(f"Import torn down at offset {stored}")
    return stored
