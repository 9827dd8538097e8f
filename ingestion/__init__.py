"""
Incremental, checkpointed import of warehouse rows as events.

Modules:
    sql: Identifier sanitizing and the batch / row-count statements
    query_executor: Serialized single-connection query execution
    checkpoint: Durable offset + ephemeral batch counter
    transformers: Named row-to-event transformations
    sinks: Downstream event capture
    runner: One batch: fetch, transform, emit, checkpoint
    scheduler: APScheduler loop with a single pending job
    lifecycle: Setup and teardown of an import

Architecture:
    Every run reads one BatchWindow at the checkpoint's effective offset,
    transforms each row, emits each event in row order and advances the
    ephemeral counter. The runner's JobOutcome decides the next run: the
    polling interval after a success, exponential backoff after a failed
    fetch, nothing once abandoned or past a historical watermark.

Usage:
    from ingestion.lifecycle import setup_import
    from ingestion.scheduler import ImportScheduler

Example:
    context = await setup_import(config, session_maker, "snowflake_import")
    scheduler = ImportScheduler(context)
    scheduler.start()
    ...
    await scheduler.stop()
"""

__all__ = [
    "ImportContext",
    "ImportJobRunner",
    "ImportScheduler",
    "CheckpointStore",
    "SnowflakeQueryExecutor",
    "get_transformation",
    "setup_import",
    "teardown_import",
]
