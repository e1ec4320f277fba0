"""Browser speech relay to a chat-completion API with local fallback replies."""

__version__ = "0.1.0"
