"""WebSocket handlers for the application."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Annotated

from fastapi import Depends, WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState

from voice_relay.config import Settings, get_settings
from voice_relay.dependencies import get_response_generator
from voice_relay.models import (
    AiResponseMessage,
    ErrorMessage,
    OutboundMessage,
    PingMessage,
    PongMessage,
    TranscriptionMessage,
    parse_inbound,
)
from voice_relay.services.response_generator import ResponseGenerator

logger = logging.getLogger(__name__)

PROCESSING_ERROR = "Failed to process message"


class ChannelRegistry:
    """Counts live channels for observability."""

    def __init__(self) -> None:
        self._active = 0

    @property
    def active(self) -> int:
        return self._active

    def register(self) -> int:
        self._active += 1
        return self._active

    def release(self) -> int:
        self._active = max(0, self._active - 1)
        return self._active


channels = ChannelRegistry()


class ChannelSession:
    """Per-connection dispatch of inbound frames.

    Pings are answered inline. Transcriptions are handed to background work
    so the receive loop never waits on the completion endpoint; with
    ``serialize`` set they share one worker and are answered in arrival order.
    """

    def __init__(
        self,
        websocket: WebSocket,
        generator: ResponseGenerator,
        *,
        serialize: bool = True,
    ) -> None:
        self._websocket = websocket
        self._generator = generator
        self._serialize = serialize
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    async def dispatch(self, raw: str | bytes) -> None:
        try:
            message = parse_inbound(raw)
        except ValueError:
            logger.warning(
                "Malformed WebSocket frame",
                extra={"client": _client_repr(self._websocket)},
            )
            await self.send(ErrorMessage(message=PROCESSING_ERROR))
            return

        if message is None:
            logger.info(
                "Ignoring unsupported message type",
                extra={"client": _client_repr(self._websocket)},
            )
            return

        if isinstance(message, PingMessage):
            await self.send(PongMessage())
        elif isinstance(message, TranscriptionMessage):
            self._submit(message.text)

    def _submit(self, text: str) -> None:
        if self._serialize:
            if self._worker is None:
                self._worker = asyncio.create_task(self._drain())
            self._queue.put_nowait(text)
            return

        task = asyncio.create_task(self._respond(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _drain(self) -> None:
        while True:
            text = await self._queue.get()
            try:
                await self._respond(text)
            except Exception:
                logger.exception(
                    "Transcription handling failed",
                    extra={"client": _client_repr(self._websocket)},
                )
            finally:
                self._queue.task_done()

    async def _respond(self, text: str) -> None:
        logger.info(
            "Received transcription",
            extra={"client": _client_repr(self._websocket), "chars": len(text)},
        )
        reply = await self._generator.generate(text)
        await self.send(AiResponseMessage(text=reply))
        logger.info(
            "AI response delivered",
            extra={"client": _client_repr(self._websocket), "chars": len(reply)},
        )

    async def send(self, message: OutboundMessage) -> None:
        """Send a frame unless the channel has already gone away."""

        if not _is_open(self._websocket):
            logger.debug(
                "Dropping frame for closed channel",
                extra={"client": _client_repr(self._websocket)},
            )
            return

        try:
            await self._websocket.send_text(message.model_dump_json())
        except (WebSocketDisconnect, RuntimeError):
            logger.debug(
                "Channel closed during send",
                extra={"client": _client_repr(self._websocket)},
            )

    async def close(self) -> None:
        """Cancel outstanding work; its results have nowhere to go."""

        pending = list(self._tasks)
        if self._worker is not None:
            pending.append(self._worker)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


async def websocket_endpoint(
    websocket: WebSocket,
    generator: Annotated[ResponseGenerator, Depends(get_response_generator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Main WebSocket workflow: transcription → response generator → ai_response."""

    await websocket.accept()
    should_close = True
    logger.info(
        "WebSocket connection accepted",
        extra={"client": _client_repr(websocket), "active_channels": channels.register()},
    )
    session = ChannelSession(websocket, generator, serialize=settings.serialize_transcriptions)

    try:
        while True:
            try:
                frame = await asyncio.wait_for(
                    _receive_frame(websocket),
                    timeout=settings.ws_inactivity_timeout,
                )
            except asyncio.TimeoutError:
                logger.info(
                    "WebSocket inactive; closing",
                    extra={"client": _client_repr(websocket)},
                )
                await websocket.close(code=status.WS_1000_NORMAL_CLOSURE)
                should_close = False
                break
            except WebSocketDisconnect:
                logger.info(
                    "WebSocket client disconnected",
                    extra={"client": _client_repr(websocket)},
                )
                should_close = False
                break

            await session.dispatch(frame)
    finally:
        await session.close()
        if should_close and websocket.application_state == WebSocketState.CONNECTED:
            with suppress(RuntimeError, WebSocketDisconnect):
                await websocket.close()
        logger.info(
            "WebSocket connection closed",
            extra={"client": _client_repr(websocket), "active_channels": channels.release()},
        )


async def _receive_frame(websocket: WebSocket) -> str | bytes:
    """Wait for the next text or binary frame."""

    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
    if message.get("text") is not None:
        return message["text"]
    return message.get("bytes") or b""


def _is_open(websocket: WebSocket) -> bool:
    return (
        websocket.application_state == WebSocketState.CONNECTED
        and websocket.client_state == WebSocketState.CONNECTED
    )


def _client_repr(websocket: WebSocket) -> str:
    """Render the remote client for logging purposes."""

    client = websocket.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"
