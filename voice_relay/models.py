"""Pydantic models for the WebSocket protocol and HTTP responses."""

from __future__ import annotations

import json
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class TranscriptionMessage(BaseModel):
    """Text recognised by the browser's speech engine."""

    type: Literal["transcription"] = "transcription"
    text: str = Field(default="", description="Transcribed user speech.")


class PingMessage(BaseModel):
    """Keep-alive probe from the client."""

    type: Literal["ping"] = "ping"


InboundMessage = Annotated[
    Union[TranscriptionMessage, PingMessage],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)
_KNOWN_TYPES = frozenset({"transcription", "ping"})


class AiResponseMessage(BaseModel):
    """Assistant reply to be spoken by the browser."""

    type: Literal["ai_response"] = "ai_response"
    text: str


class ErrorMessage(BaseModel):
    """Error frame returned to WebSocket clients."""

    type: Literal["error"] = "error"
    message: str


class PongMessage(BaseModel):
    type: Literal["pong"] = "pong"


OutboundMessage = Union[AiResponseMessage, ErrorMessage, PongMessage]


class HealthStatus(BaseModel):
    """Static description of how the service is wired."""

    status: str = "ok"
    mode: str = "browser-stt-tts"
    stt: str = "Web Speech API"
    tts: str = "Web Speech API"
    ai: str


def parse_inbound(raw: str | bytes) -> InboundMessage | None:
    """Decode one inbound frame.

    Raises ``ValueError`` when the frame is not a JSON object or a known
    message kind carries invalid fields. Returns ``None`` for message kinds
    the server does not handle.
    """

    try:
        data = json.loads(raw)
    except RecursionError as exc:
        raise ValueError("WebSocket payload is nested too deeply") from exc
    if not isinstance(data, dict):
        raise ValueError("WebSocket payload must be a JSON object")

    message_type = data.get("type")
    if not isinstance(message_type, str) or message_type not in _KNOWN_TYPES:
        return None

    return _inbound_adapter.validate_python(data)
