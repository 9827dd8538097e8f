"""
Pydantic schemas for import job state: cursor, batch window, retry payload, outcome
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from models.base import ImportMechanism, JobState


class BatchWindow(BaseModel):
    """
    A contiguous slice of the source table.

    Consecutive successful windows satisfy next.offset == prev.offset + prev.limit.
    """

    model_config = ConfigDict(frozen=True)

    offset: int = Field(..., ge=0)
    limit: int = Field(..., gt=0)

    @property
    def end(self) -> int:
        return self.offset + self.limit

    def next(self) -> "BatchWindow":
        return BatchWindow(offset=self.end, limit=self.limit)

    def __str__(self) -> str:
        return f"rows {self.offset}-{self.end}"


class RetryState(BaseModel):
    """
    Payload carried by a scheduled job invocation.

    A payload with an offset is a retry of that exact window; a payload
    without one starts a fresh batch at the checkpoint's effective offset.
    """

    model_config = ConfigDict(frozen=True)

    attempts_so_far: int = Field(0, ge=0)
    offset: Optional[int] = Field(None, ge=0)

    @property
    def is_retry(self) -> bool:
        return self.offset is not None

    @classmethod
    def fresh(cls) -> "RetryState":
        return cls(attempts_so_far=0)

    def next_attempt(self, offset: int) -> "RetryState":
        return RetryState(attempts_so_far=self.attempts_so_far + 1, offset=offset)


class ImportCursor(BaseModel):
    """Where the import currently stands"""

    offset: int = Field(..., ge=0)
    total_rows_snapshot: Optional[int] = Field(None, ge=0)
    mode: ImportMechanism


class JobOutcome(BaseModel):
    """
    Result of one job run and the scheduling decision it implies.

    next_payload is None exactly when no successor should be scheduled
    (ABANDONED, TERMINATED).
    """

    state: JobState
    window: Optional[BatchWindow] = None
    next_payload: Optional[RetryState] = None
    delay_seconds: Optional[float] = None
    events_ingested: int = 0
    events_skipped: int = 0
    error: Optional[str] = None

    @property
    def reschedules(self) -> bool:
        return self.next_payload is not None
