"""
Everything one running import needs, built once at setup and passed to the
runner, scheduler and teardown.
"""

from dataclasses import dataclass

from ingestion.checkpoint import CheckpointStore
from ingestion.query_executor import QueryExecutor
from ingestion.sinks import EventSink
from ingestion.transformers import Transformation
from schemas.config import ImportConfig


@dataclass
class ImportContext:
    config: ImportConfig
    executor: QueryExecutor
    checkpoints: CheckpointStore
    transformation: Transformation
    sink: EventSink
    max_attempts: int = 15
    retry_base_delay: int = 3
