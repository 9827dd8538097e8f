"""
Pydantic schemas for configuration, job state and events.

Schemas:
    config: ImportConfig, validated from the host's string key/value config
    job: BatchWindow, RetryState (job payload), ImportCursor, JobOutcome
    events: TransformedEvent produced by row transformations
    api: API response models

Usage:
    from schemas.config import ImportConfig
    from schemas.job import BatchWindow, RetryState
    from schemas.events import TransformedEvent

Example:
    config = ImportConfig.from_mapping(host_config, attachments)
    window = BatchWindow(offset=0, limit=config.batch_size)
    assert window.next().offset == config.batch_size
"""

__all__ = [
    "ImportConfig",
    "BatchWindow",
    "RetryState",
    "ImportCursor",
    "JobOutcome",
    "TransformedEvent",
    "HealthCheckResponse",
]
