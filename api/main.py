"""
FastAPI application hosting the import
"""

from fastapi import FastAPI
from api.routes import health
from core.config import settings
from core.database import create_state_engine, create_session_maker
from core.logging import setup_logging
from ingestion.lifecycle import build_sink, load_import_config_file, setup_import
from ingestion.scheduler import ImportScheduler
import logging

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Snowflake Import Service",
    description="Incremental, checkpointed import of Snowflake rows as events",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.state.scheduler = None

# Include routers
app.include_router(health.router)


@app.on_event("startup")
async def startup_event():
    """Open the state store, set the import up and start scheduling"""
    setup_logging()
    logger.info("Starting Snowflake Import Service")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    app.state.engine = create_state_engine()
    app.state.session_maker = create_session_maker(app.state.engine)

    if not settings.IMPORT_CONFIG_PATH:
        logger.warning("IMPORT_CONFIG_PATH is not set; no import will run")
        return

    config = load_import_config_file(settings.IMPORT_CONFIG_PATH)
    context = await setup_import(
        config,
        session_maker=app.state.session_maker,
        import_name=settings.IMPORT_NAME,
        sink=build_sink(settings),
        max_attempts=settings.MAX_RETRY_ATTEMPTS,
        retry_base_delay=settings.RETRY_BASE_DELAY_SECONDS
    )

    app.state.scheduler = ImportScheduler(context)
    app.state.scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Persist the cursor and release connections"""
    logger.info("Shutting down Snowflake Import Service")
    try:
        if app.state.scheduler is not None:
            await app.state.scheduler.stop()
    finally:
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Snowflake Import Service",
        "version": "1.0.0",
        "import_name": settings.IMPORT_NAME,
        "docs": "/docs",
        "health": "/health"
    }
