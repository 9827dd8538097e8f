# ============================================================================
# File: ingestion/runner.py
# Description: One batch of the import: fetch, transform, emit, checkpoint
# ============================================================================
"""
Import job runner.

A run moves through RUNNING to exactly one of:

- SUCCESS: the batch was fetched, every row transformed and emitted, and the
  ephemeral counter advanced. The successor is a fresh batch after the
  polling interval.
- RETRY: the fetch failed. The successor retries the same offset after
  base * 2^attempts seconds.
- ABANDONED: the same offset failed max_attempts times. No successor; the
  checkpoint stays at the stalled offset.
- TERMINATED: a historical import has read past its row watermark. No
  successor.

Transformation failures are not outcomes: they propagate to the caller,
since retrying a misconfigured transformation cannot succeed.
"""

from typing import List
import logging

from core.exceptions import QueryExecutionError, TransformationError
from ingestion.context import ImportContext
from ingestion.sql import build_batch_query
from ingestion.transformers.base import Row
from models.base import JobState
from schemas.events import TransformedEvent
from schemas.job import BatchWindow, JobOutcome, RetryState

logger = logging.getLogger(__name__)


def retry_delay_seconds(attempts_so_far: int, base_delay: int = 3) -> int:
    """3s, 6s, 12s, ... for attempts 0, 1, 2, ..."""
    return base_delay * 2 ** attempts_so_far


class ImportJobRunner:
    """
    Runs a single import job invocation.

    The runner never schedules anything itself; it returns a JobOutcome whose
    next_payload/delay_seconds tell the scheduler what to run next.
    """

    def __init__(self, context: ImportContext):
        self.context = context

    async def _resolve_offset(self, payload: RetryState) -> int:
        if payload.is_retry:
            return payload.offset
        return await self.context.checkpoints.effective_offset()

    def _transform(self, row: Row, window: BatchWindow) -> TransformedEvent:
        transformation = self.context.transformation
        try:
            return transformation.transform(row)
        except TransformationError as e:
            e.context.update({"window": str(window), "transformation": transformation.name})
            raise
        except Exception as e:
            raise TransformationError(
                "Transformation failed",
                context={"window": str(window), "transformation": transformation.name},
                original_exception=e
            )

    async def _emit(self, events: List[TransformedEvent]) -> int:
        ignored = self.context.config.events_to_ignore
        ingested = 0
        for event in events:
            if not event.is_emittable:
                logger.warning("Skipping event without a name")
                continue
            if event.event in ignored:
                logger.debug(f"Ignoring event {event.event!r}")
                continue
            await self.context.sink.capture(event.event, event.properties)
            ingested += 1
        return ingested

    async def run(self, payload: RetryState) -> JobOutcome:
        config = self.context.config
        checkpoints = self.context.checkpoints

        offset = await self._resolve_offset(payload)
        window = BatchWindow(offset=offset, limit=config.batch_size)
        logger.info(f"Importing {window} (attempt {payload.attempts_so_far + 1})")

        if (
            checkpoints.is_historical
            and checkpoints.total_rows_snapshot is not None
            and offset > checkpoints.total_rows_snapshot
        ):
            logger.info(
                "Done importing historical rows. "
                "Please disable or reactivate with continuous import."
            )
            return JobOutcome(state=JobState.TERMINATED, window=window)

        if payload.is_retry and payload.attempts_so_far >= self.context.max_attempts:
            logger.error(
                f"Import error: Unable to process {window} after "
                f"{payload.attempts_so_far} attempts. The import is stalled at offset {offset}."
            )
            return JobOutcome(
                state=JobState.ABANDONED,
                window=window,
                error=f"Gave up after {payload.attempts_so_far} attempts"
            )

        try:
            rows = await self.context.executor.execute(
                build_batch_query(config.table, config.order_by, window.limit),
                {"offset": window.offset}
            )
        except QueryExecutionError as e:
            delay = retry_delay_seconds(payload.attempts_so_far, self.context.retry_base_delay)
            cause = e.original_exception or e.message
            logger.warning(
                f"Unable to process {window}. Retrying in {delay} seconds. Error: {cause}",
                extra={"error_context": e.to_dict()}
            )
            return JobOutcome(
                state=JobState.RETRY,
                window=window,
                next_payload=payload.next_attempt(window.offset),
                delay_seconds=delay,
                error=str(cause)
            )

        events = [self._transform(row, window) for row in rows]
        ingested = await self._emit(events)

        # An empty continuous batch leaves the offset where it is so rows
        # appended later are still read from here.
        if rows or checkpoints.is_historical:
            await checkpoints.ephemeral_increment()

        logger.info(
            f"Processed {window} and ingested {ingested} event{'' if ingested == 1 else 's'} from them."
        )

        return JobOutcome(
            state=JobState.SUCCESS,
            window=window,
            next_payload=RetryState.fresh(),
            delay_seconds=config.frequency,
            events_ingested=ingested,
            events_skipped=len(events) - ingested
        )
