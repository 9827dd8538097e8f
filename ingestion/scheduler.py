import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from core.exceptions import ImportException
from ingestion.context import ImportContext
from ingestion.lifecycle import teardown_import
from ingestion.runner import ImportJobRunner
from schemas.job import JobOutcome, RetryState

logger = logging.getLogger(__name__)

JOB_ID = "import_and_ingest_events"


class ImportScheduler:
    """
    Drives the import one job at a time.

    Only one job (JOB_ID) is ever pending: each run's outcome schedules its
    successor, or nothing once the import is abandoned or terminated.
    """

    def __init__(self, context: ImportContext, scheduler: Optional[AsyncIOScheduler] = None):
        self.context = context
        self.runner = ImportJobRunner(context)
        self.scheduler = scheduler or AsyncIOScheduler()
        self._run_lock = asyncio.Lock()
        self._stopping = False
        self._halted = False
        self.last_outcome: Optional[JobOutcome] = None
        self.last_error: Optional[str] = None

    @property
    def running(self) -> bool:
        """True while a successor job is still expected"""
        return self.scheduler.running and not (self._stopping or self._halted)

    def schedule(self, payload: RetryState, delay_seconds: float):
        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay_seconds)
        self.scheduler.add_job(
            self.run_job,
            trigger=DateTrigger(run_date=run_date),
            args=[payload],
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None
        )
        logger.debug(f"Next import job in {delay_seconds} seconds ({payload})")

    async def run_job(self, payload: RetryState) -> Optional[JobOutcome]:
        """Run one job and schedule its successor"""
        async with self._run_lock:
            if self._stopping:
                return None

            try:
                outcome = await self.runner.run(payload)
            except ImportException as e:
                self._halted = True
                self.last_error = e.message
                logger.error(
                    f"Import halted: {e.message}",
                    extra={"error_context": e.to_dict()}
                )
                raise
            except Exception as e:
                self._halted = True
                self.last_error = str(e)
                logger.exception("Unexpected error in import job")
                raise

            self.last_outcome = outcome
            self.last_error = outcome.error
            if not outcome.reschedules:
                self._halted = True
            elif not self._stopping:
                self.schedule(outcome.next_payload, outcome.delay_seconds)
            return outcome

    def start(self):
        """Start the scheduler; the first batch runs one polling interval from now"""
        if not self.scheduler.running:
            self.scheduler.start()
        self.schedule(RetryState.fresh(), self.context.config.frequency)
        logger.info("Import scheduler started")

    async def stop(self) -> int:
        """
        Stop scheduling and tear the import down.

        Waits for an in-flight job so its checkpoint increment is included in
        the persisted offset.
        """
        self._stopping = True
        if self.scheduler.get_job(JOB_ID) is not None:
            self.scheduler.remove_job(JOB_ID)

        async with self._run_lock:
            if self.scheduler.running:
                self.scheduler.shutdown(wait=False)
            offset = await teardown_import(self.context)

        logger.info("Import scheduler stopped")
        return offset
