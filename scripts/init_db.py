"""
Create the state store tables and report any state already stored
"""

import asyncio
import logging
import os
import sys

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_session_maker, create_state_engine
from core.logging import setup_logging
from ingestion.checkpoint import OFFSET_KEY, TOTAL_ROWS_KEY, StateStorage
from models.base import Base
from models.checkpoint import ImportState  # noqa: F401

logger = logging.getLogger(__name__)


async def init_database(database_url: str = None):
    engine = create_state_engine(database_url)

    try:
        async with engine.begin() as conn:
            logger.info("Creating state store tables...")
            await conn.run_sync(Base.metadata.create_all)

        storage = StateStorage(create_session_maker(engine), settings.IMPORT_NAME)
        offset = await storage.get(OFFSET_KEY)
        snapshot = await storage.get(TOTAL_ROWS_KEY)
        if offset is None and snapshot is None:
            logger.info(f"No state stored yet for import {settings.IMPORT_NAME}")
        else:
            logger.info(
                f"Import {settings.IMPORT_NAME}: offset={offset}, total_rows_snapshot={snapshot}"
            )
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database(sys.argv[1] if len(sys.argv) > 1 else None))
