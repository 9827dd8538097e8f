"""
Custom exceptions for the import pipeline with structured error context.

Every exception carries a context dictionary (batch window, config key,
attachment name...) so that log records and health output can show where
the failure happened, not only what it was.

Exception Hierarchy:
    ImportException (base)
    ├── ConfigurationError
    │   └── MissingAttachmentError
    ├── ExtractionError
    │   └── QueryExecutionError (retryable)
    ├── TransformationError (non-retryable)
    │   └── InvalidAttachmentError
    ├── CheckpointError
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ImportException(Exception):
    """
    Base exception for all import-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (offset, table, key, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(ImportException):
    """
    Mixin for errors that should be retried with backoff.

    Use this for transient faults like lost connectivity to the warehouse
    or a query that timed out.
    """
    pass


class NonRetryableError(ImportException):
    """
    Mixin for errors that retrying cannot fix.

    Use this for structural misconfiguration like a malformed mapping
    document or a row shape the selected transformation does not accept.
    """
    pass


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(NonRetryableError):
    """
    Exception raised when the import configuration is unusable.

    Context should include:
        - missing_keys: Required config keys that were not provided
        - config_key: The key whose value is invalid
        - value: The offending value
    """
    pass


class MissingAttachmentError(ConfigurationError):
    """
    Exception raised when a transformation requires an attachment that was
    not provided.

    Context should include:
        - transformation: Name of the transformation
        - attachment: Name of the missing attachment
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ImportException):
    """Base exception for data source failures."""
    pass


class QueryExecutionError(RetryableError, ExtractionError):
    """
    Exception raised when a query against the data source fails.

    Context should include:
        - sql_text: The statement that failed
        - binds: Bound parameter values
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(NonRetryableError):
    """
    Exception raised when a row cannot be turned into an event.

    Context should include:
        - transformation: Name of the transformation
        - column: Column that caused the failure (if applicable)
    """
    pass


class InvalidAttachmentError(TransformationError):
    """
    Exception raised when an attachment is present but unusable.

    Context should include:
        - transformation: Name of the transformation
        - attachment: Name of the attachment
    """
    pass


# ============================================================================
# Checkpoint Errors
# ============================================================================

class CheckpointError(ImportException):
    """
    Exception raised when the durable state store cannot be read or written.

    Context should include:
        - import_name: Namespace of the import
        - key: State key being accessed
        - operation: Operation that failed (read, write)
    """
    pass
