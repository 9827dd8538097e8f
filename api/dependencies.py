from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from ingestion.scheduler import ImportScheduler


def get_session_maker(request: Request) -> async_sessionmaker:
    return request.app.state.session_maker


def get_scheduler(request: Request) -> Optional[ImportScheduler]:
    return getattr(request.app.state, "scheduler", None)
