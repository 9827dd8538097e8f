"""
Script to run the import until interrupted
"""

import asyncio
import logging
import os
import signal
import sys

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_state_engine, create_session_maker
from core.exceptions import ImportException
from core.logging import setup_logging
from ingestion.lifecycle import build_sink, load_import_config_file, setup_import
from ingestion.scheduler import ImportScheduler

logger = logging.getLogger(__name__)


async def run_import():
    """Set the import up, schedule it and tear it down on SIGINT/SIGTERM"""

    if not settings.IMPORT_CONFIG_PATH:
        logger.error("IMPORT_CONFIG_PATH is not set")
        sys.exit(1)

    engine = create_state_engine()
    session_maker = create_session_maker(engine)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        config = load_import_config_file(settings.IMPORT_CONFIG_PATH)
        context = await setup_import(
            config,
            session_maker=session_maker,
            import_name=settings.IMPORT_NAME,
            sink=build_sink(settings),
            max_attempts=settings.MAX_RETRY_ATTEMPTS,
            retry_base_delay=settings.RETRY_BASE_DELAY_SECONDS
        )

        scheduler = ImportScheduler(context)
        scheduler.start()

        await stop_event.wait()
        offset = await scheduler.stop()
        logger.info(f"Import stopped at offset {offset}")

    except ImportException as e:
        logger.error(f"Import failed: {e}", extra={"error_context": e.to_dict()})
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(run_import())
