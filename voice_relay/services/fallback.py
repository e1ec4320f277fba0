"""Keyword-driven replies used when no completion endpoint is available."""

from __future__ import annotations

import random
from typing import Sequence

# Checked in order; the first rule with a matching keyword wins.
KEYWORD_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("hello", "hi"), "Hello! How are you doing today?"),
    (
        ("how are you",),
        "I'm doing great, thank you for asking! How are you feeling today?",
    ),
    (
        ("thank you", "thanks"),
        "You're very welcome! Is there anything else I can help you with?",
    ),
    (("goodbye", "bye"), "Goodbye! It was nice talking with you. Have a great day!"),
    (("help",), "I'm here to help! What would you like to know or discuss?"),
    (
        ("weather",),
        "I don't have access to current weather data, but I hope you're having a nice day!",
    ),
    (
        ("time",),
        "I don't have access to the current time, but I hope you're having a good day!",
    ),
)

GENERIC_REPLIES: tuple[str, ...] = (
    "That's interesting! Tell me more about that.",
    "I understand what you're saying. How can I help you further?",
    "That's a great point. What would you like to know?",
    "I see. Is there anything specific you'd like to discuss?",
    "Thanks for sharing that with me. What else is on your mind?",
    "That sounds fascinating! Can you elaborate on that?",
    "I'm here to help. What else would you like to talk about?",
    "That's a good question. Let me think about that for a moment.",
    "I appreciate you sharing that with me. What's your perspective on this?",
    "That's really interesting. I'd love to hear more about your thoughts on this.",
)


class FallbackResponder:
    """Produces a canned reply for a piece of user text."""

    def __init__(
        self,
        rng: random.Random | None = None,
        generic_replies: Sequence[str] = GENERIC_REPLIES,
    ) -> None:
        if not generic_replies:
            raise ValueError("generic_replies must not be empty")
        self._rng = rng or random.Random()
        self._generic_replies = tuple(generic_replies)

    def match(self, text: str) -> str | None:
        """Return the keyword reply for ``text``, or ``None`` if nothing matches."""

        lowered = text.lower()
        for keywords, reply in KEYWORD_RULES:
            if any(keyword in lowered for keyword in keywords):
                return reply
        return None

    def respond(self, text: str) -> str:
        reply = self.match(text)
        if reply is not None:
            return reply
        return self._rng.choice(self._generic_replies)
