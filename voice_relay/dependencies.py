"""Dependency providers for the FastAPI application."""

from functools import lru_cache

import httpx
from fastapi import Depends
from starlette.requests import HTTPConnection

from voice_relay.config import Settings, get_settings
from voice_relay.services.completion_service import CompletionService
from voice_relay.services.fallback import FallbackResponder
from voice_relay.services.response_generator import ResponseGenerator


async def get_http_client(connection: HTTPConnection) -> httpx.AsyncClient:
    """Retrieve the shared AsyncClient from application state."""

    return connection.app.state.http_client  # type: ignore[return-value]


async def get_completion_service(
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> CompletionService | None:
    """Return a CompletionService, or ``None`` when no credential is configured."""

    if not settings.remote_enabled:
        return None
    return CompletionService(client=client, settings=settings)


@lru_cache
def get_fallback_responder() -> FallbackResponder:
    return FallbackResponder()


async def get_response_generator(
    completion: CompletionService | None = Depends(get_completion_service),
    fallback: FallbackResponder = Depends(get_fallback_responder),
) -> ResponseGenerator:
    """Dependency provider for ResponseGenerator."""

    return ResponseGenerator(completion=completion, fallback=fallback)
