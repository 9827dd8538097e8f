"""
Health check endpoint with state store and import status
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from api.dependencies import get_scheduler, get_session_maker
from core.config import settings
from core.exceptions import CheckpointError
from schemas.api import HealthCheckResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    session_maker: async_sessionmaker = Depends(get_session_maker),
    scheduler=Depends(get_scheduler)
):
    """
    Health check endpoint.

    Returns:
    - State store connectivity
    - Current import cursor
    - Outcome of the last import job
    """

    db_connected = False

    try:
        async with session_maker() as session:
            await session.execute(text("SELECT 1"))
        db_connected = True
    except SQLAlchemyError as e:
        logger.error(f"State store connection failed: {str(e)}")

    cursor = None
    last_outcome = None
    last_error = None
    scheduler_running = False

    if scheduler is not None:
        scheduler_running = scheduler.running
        last_outcome = scheduler.last_outcome
        last_error = scheduler.last_error
        try:
            cursor = await scheduler.context.checkpoints.cursor()
        except CheckpointError as e:
            logger.error(f"Failed to read import cursor: {e.message}")

    return HealthCheckResponse(
        database_connected=db_connected,
        import_name=settings.IMPORT_NAME,
        scheduler_running=scheduler_running,
        cursor=cursor,
        last_outcome=last_outcome,
        last_error=last_error
    )
