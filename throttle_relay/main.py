"""Throttle Relay - Main Entry Point."""

import logging
import signal
import sys
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, HTTPException, Request

from throttle_relay import __version__
from throttle_relay.config import get_settings, Settings
from throttle_relay.ingestion.alarm_webhook import router as alarm_router
from throttle_relay.notifier.dispatcher import AlarmDispatcher
from throttle_relay.store.client import DynamoDBStoreClient
from throttle_relay.writer.driver import (
    InvalidBatchSizeError,
    ThrottlingDetectedError,
    WriteDriver,
)
from throttle_relay.writer.scheduler import WriteScheduler


# Configure structured logging
def setup_logging(settings: Settings):
    """Configure structured logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    setup_logging(settings)

    logger.info(
        "Starting Throttle Relay",
        version=__version__,
        table=settings.store.table_name,
        webhook_enabled=settings.webhook.enabled,
        host=settings.server.host,
        port=settings.server.port,
    )

    async with AsyncExitStack() as stack:
        # Store client stays open for the life of the app
        store = await stack.enter_async_context(
            DynamoDBStoreClient(settings.store, max_connections=settings.writer.write_count)
        )
        driver = WriteDriver(store, settings.writer)

        # Fails startup when the webhook is enabled but misconfigured
        dispatcher = AlarmDispatcher.from_config(settings.webhook)
        if not settings.webhook.enabled:
            logger.warning(
                "Webhook is DISABLED, incidents will only be logged",
                hint="set WEBHOOK_ENABLED=true and configure WEBHOOK_URL and WEBHOOK_SECRET",
            )

        scheduler: Optional[WriteScheduler] = None
        if settings.writer.schedule_interval_seconds > 0:
            scheduler = WriteScheduler(driver, settings.writer.schedule_interval_seconds)
            await scheduler.start()
        else:
            logger.info("Write schedule disabled")

        # Store in app state for access from routes
        app.state.settings = settings
        app.state.driver = driver
        app.state.dispatcher = dispatcher
        app.state.scheduler = scheduler

        logger.info("Throttle Relay started successfully")

        yield

        logger.info("Shutting down Throttle Relay")
        if scheduler:
            await scheduler.stop()

    logger.info("Throttle Relay stopped")


# Create FastAPI application
app = FastAPI(
    title="Throttle Relay",
    description="Provokes store write throttling on a schedule and relays alarms as signed incidents",
    version=__version__,
    lifespan=lifespan,
)


# Include routers
app.include_router(alarm_router, prefix="/webhooks", tags=["Webhooks"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Throttle Relay",
        "version": __version__,
        "endpoints": {
            "health": "/health",
            "webhooks": {
                "alarm": "/webhooks/alarm",
            },
            "writer": "/writer/run",
        },
    }


@app.post("/writer/run")
async def run_writer(request: Request, count: Optional[int] = None):
    """
    Run one write batch now. Responds 503 when the batch was throttled.

    A count larger than the shared store client's pool gets its own client
    sized to the batch, so every put is in flight at once.
    """
    driver: Optional[WriteDriver] = getattr(request.app.state, "driver", None)
    if driver is None:
        raise HTTPException(status_code=503, detail="Write driver not initialized")

    limit = driver.store.max_concurrency
    try:
        if count is not None and limit is not None and count > limit:
            settings: Settings = request.app.state.settings
            logger.info("Opening batch-sized store client", count=count, shared_pool=limit)
            async with DynamoDBStoreClient(settings.store, max_connections=count) as store:
                result = await WriteDriver(store, driver.config).run_batch(count)
        else:
            result = await driver.run_batch(count)
    except InvalidBatchSizeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ThrottlingDetectedError as e:
        raise HTTPException(
            status_code=503,
            detail={"error": str(e), "result": e.result.to_dict()},
        )

    return result.to_dict()


def handle_signal(signum, frame):
    """Handle shutdown signals."""
    logger.info(f"Received signal {signum}, initiating shutdown")
    sys.exit(0)


def main():
    """Main entry point."""
    # Register signal handlers
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    settings = get_settings()

    uvicorn.run(
        "throttle_relay.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        reload=False,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
