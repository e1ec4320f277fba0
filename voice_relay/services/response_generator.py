"""Turns user text into assistant text, remotely when possible."""

from __future__ import annotations

import logging

from voice_relay.exceptions import CompletionServiceError
from voice_relay.services.completion_service import CompletionService
from voice_relay.services.fallback import FallbackResponder

logger = logging.getLogger(__name__)


class ResponseGenerator:
    """Always yields a reply: the completion endpoint first, keyword fallback second.

    A ``completion`` of ``None`` means no credential is configured, in which
    case no network I/O is ever attempted.
    """

    def __init__(
        self,
        completion: CompletionService | None,
        fallback: FallbackResponder,
    ) -> None:
        self._completion = completion
        self._fallback = fallback

    @property
    def mode(self) -> str:
        return "fallback" if self._completion is None else "remote"

    async def generate(self, text: str) -> str:
        if self._completion is not None:
            try:
                return await self._completion.complete(text)
            except CompletionServiceError as exc:
                logger.info(
                    "Completion unavailable; using fallback reply",
                    extra={"error_code": exc.code, "status_code": exc.status_code},
                )
            except Exception:
                logger.exception("Unexpected completion failure; using fallback reply")

        return self._fallback.respond(text)
