"""Adapter for OpenAI-compatible chat completions (Groq by default)."""

from __future__ import annotations

import asyncio
import logging

import httpx

from voice_relay.config import Settings
from voice_relay.exceptions import CompletionServiceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful, friendly AI assistant. Keep responses concise and natural "
    "for voice conversation (2-3 sentences max). Be conversational and engaging."
)


class CompletionService:
    """Single-turn wrapper around a chat completions endpoint."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        if not settings.completion_api_key:
            raise ValueError("CompletionService requires a completion API key")
        self._client = client
        self._settings = settings

    async def complete(self, prompt: str) -> str:
        """Return the assistant text for one user utterance."""

        payload = {
            "model": self._settings.completion_model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self._settings.completion_max_tokens,
            "temperature": self._settings.completion_temperature,
        }

        headers = {
            "Authorization": f"Bearer {self._settings.completion_api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await asyncio.wait_for(
                self._client.post(
                    self._settings.completion_endpoint,
                    headers=headers,
                    json=payload,
                    timeout=self._settings.completion_timeout,
                ),
                timeout=self._settings.completion_timeout,
            )
            response.raise_for_status()
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning("Chat completion timed out", exc_info=exc)
            raise CompletionServiceError("Completion service timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Chat completion failed",
                extra={
                    "status_code": exc.response.status_code,
                    "response_text": exc.response.text,
                },
            )
            raise CompletionServiceError(
                "Completion service returned an error",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.exception("Unexpected completion HTTP error")
            raise CompletionServiceError("Completion service request failed") from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Non-JSON completion response", extra={"response_text": response.text})
            raise CompletionServiceError("Invalid completion response payload") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("Malformed completion response", extra={"raw_response": data})
            raise CompletionServiceError("Invalid completion response payload") from exc

        if not isinstance(content, str) or not content:
            raise CompletionServiceError("Completion service returned empty content")

        return content
