"""
FastAPI application entrypoint for the Drive relay.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from drive_relay.api.routes import router as api_router
from drive_relay.core.config import get_settings
from drive_relay.core.errors import register_exception_handlers
from drive_relay.core.logging import configure_logging
from drive_relay.dependencies import get_credential_store, get_session_service

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the expired-credential sweep and clear the store on shutdown."""
    settings = get_settings()
    interval = settings.session.sweep_interval_seconds
    sweeper: asyncio.Task | None = None
    if interval > 0:
        sweeper = asyncio.create_task(get_session_service().run_sweeper(interval))
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        get_credential_store().clear()
        logger.info("Credential store cleared")


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Drive Relay",
        version="0.1.0",
        description="Authorize against Google Drive and upload files on a caller's behalf.",
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


__all__ = ["app", "create_app", "run"]
