"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import httpx
from fastapi import Depends, FastAPI
from fastapi.staticfiles import StaticFiles

from voice_relay import __version__
from voice_relay.config import Settings, get_settings
from voice_relay.logging import configure_logging
from voice_relay.models import HealthStatus
from voice_relay.websocket_handlers import websocket_endpoint

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create application resources during startup and clean up on shutdown."""

    settings = get_settings()
    if settings.remote_enabled:
        logger.info(
            "Completion API key found; using remote responses",
            extra={"model": settings.completion_model},
        )
    else:
        logger.warning("Completion API key is not set; using fallback responses")

    async with httpx.AsyncClient() as client:
        app.state.http_client = client
        yield
        del app.state.http_client


def describe_ai(settings: Settings) -> str:
    if settings.remote_enabled:
        return f"Groq {settings.completion_model}"
    return "Fallback responses"


def create_app() -> FastAPI:
    """Application factory."""

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Browser Speech Relay",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/health", response_model=HealthStatus)
    async def health(settings: Settings = Depends(get_settings)) -> HealthStatus:
        return HealthStatus(ai=describe_ai(settings))

    @app.get("/version")
    async def version(settings: Settings = Depends(get_settings)) -> dict[str, str]:
        return {"version": __version__, "environment": settings.environment}

    app.add_api_websocket_route("/", websocket_endpoint)
    app.add_api_websocket_route("/ws", websocket_endpoint)

    # Mounted last so the routes above take precedence over files.
    if settings.static_dir is not None:
        static_path = Path(settings.static_dir)
        if static_path.is_dir():
            app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
        else:
            logger.warning("Static directory not found", extra={"static_dir": str(static_path)})

    return app


app = create_app()
