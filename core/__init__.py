"""
Core utilities and configuration for the Snowflake import service.

This package provides foundational components used throughout the import:

Modules:
    config: Process settings and environment variable management
    database: Async engine and session factory for the durable state store
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import create_state_engine, create_session_maker
    from core.exceptions import QueryExecutionError, ConfigurationError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Open the state store
    engine = create_state_engine()
    session_maker = create_session_maker(engine)
"""

__all__ = [
    "settings",
    "create_state_engine",
    "create_session_maker",
    "setup_logging",
    # Exceptions
    "ImportException",
    "RetryableError",
    "NonRetryableError",
    "ConfigurationError",
    "MissingAttachmentError",
    "ExtractionError",
    "QueryExecutionError",
    "TransformationError",
    "InvalidAttachmentError",
    "CheckpointError",
]
