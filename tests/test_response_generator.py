import random

import httpx
import pytest

from voice_relay.config import Settings
from voice_relay.dependencies import get_completion_service
from voice_relay.services.completion_service import CompletionService
from voice_relay.services.fallback import GENERIC_REPLIES, FallbackResponder
from voice_relay.services.response_generator import ResponseGenerator

WEATHER = "I don't have access to current weather data, but I hope you're having a nice day!"


class RecordingTransport(httpx.MockTransport):
    def __init__(self, response: httpx.Response | None = None, error: Exception | None = None):
        self.calls: list[httpx.Request] = []
        self._response = response
        self._error = error
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


@pytest.fixture
def fallback() -> FallbackResponder:
    return FallbackResponder(rng=random.Random(0))


@pytest.mark.asyncio
async def test_no_credential_never_touches_network(fallback: FallbackResponder) -> None:
    transport = RecordingTransport(httpx.Response(200, json={}))

    async with httpx.AsyncClient(transport=transport) as client:
        completion = await get_completion_service(client=client, settings=Settings())
        generator = ResponseGenerator(completion, fallback)
        greeting = await generator.generate("Hello there")
        weather = await generator.generate("weather today")
        generic = await generator.generate("tell me a story")

    assert completion is None
    assert generator.mode == "fallback"
    assert transport.calls == []
    assert greeting == "Hello! How are you doing today?"
    assert WEATHER in weather
    assert generic in GENERIC_REPLIES


@pytest.mark.asyncio
async def test_remote_reply_is_returned(fallback: FallbackResponder) -> None:
    transport = RecordingTransport(
        httpx.Response(200, json={"choices": [{"message": {"content": "Nice to meet you!"}}]})
    )

    async with httpx.AsyncClient(transport=transport) as client:
        completion = CompletionService(client, Settings(completion_api_key="test-key"))
        generator = ResponseGenerator(completion, fallback)
        reply = await generator.generate("Hello there")

    assert generator.mode == "remote"
    assert reply == "Nice to meet you!"
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_upstream_500_falls_back(fallback: FallbackResponder) -> None:
    transport = RecordingTransport(httpx.Response(500, json={"error": "boom"}))

    async with httpx.AsyncClient(transport=transport) as client:
        completion = CompletionService(client, Settings(completion_api_key="test-key"))
        reply = await ResponseGenerator(completion, fallback).generate("weather today")

    assert len(transport.calls) == 1
    assert reply == WEATHER


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        httpx.ReadTimeout("slow"),
        httpx.ConnectError("refused"),
    ],
)
async def test_transport_failures_fall_back(fallback: FallbackResponder, error: Exception) -> None:
    transport = RecordingTransport(error=error)

    async with httpx.AsyncClient(transport=transport) as client:
        completion = CompletionService(client, Settings(completion_api_key="test-key"))
        reply = await ResponseGenerator(completion, fallback).generate("tell me a story")

    assert reply in GENERIC_REPLIES


@pytest.mark.asyncio
async def test_malformed_upstream_body_falls_back(fallback: FallbackResponder) -> None:
    transport = RecordingTransport(httpx.Response(200, json={"choices": [{}]}))

    async with httpx.AsyncClient(transport=transport) as client:
        completion = CompletionService(client, Settings(completion_api_key="test-key"))
        reply = await ResponseGenerator(completion, fallback).generate("thanks")

    assert reply == "You're very welcome! Is there anything else I can help you with?"


class BrokenCompletion:
    async def complete(self, prompt: str) -> str:
        raise RuntimeError("unexpected")


@pytest.mark.asyncio
async def test_unexpected_completion_error_falls_back(fallback: FallbackResponder) -> None:
    reply = await ResponseGenerator(BrokenCompletion(), fallback).generate("weather today")

    assert reply == WEATHER


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "settings",
    [
        Settings(completion_api_key="kéy-with-accent"),
        Settings(completion_api_key="test-key", completion_endpoint="http://[::1/v1"),
    ],
)
async def test_request_build_errors_fall_back(
    fallback: FallbackResponder, settings: Settings
) -> None:
    transport = RecordingTransport(httpx.Response(200, json={}))

    async with httpx.AsyncClient(transport=transport) as client:
        completion = CompletionService(client, settings)
        reply = await ResponseGenerator(completion, fallback).generate("weather today")

    assert reply == WEATHER
    assert transport.calls == []
