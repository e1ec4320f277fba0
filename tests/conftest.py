"""Shared pytest fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.pop("GROQ_API_KEY", None)
os.environ.pop("COMPLETION_API_KEY", None)
os.environ.setdefault("ENVIRONMENT", "test")

from voice_relay.config import get_settings  # noqa: E402
from voice_relay.main import create_app  # noqa: E402
from voice_relay.websocket_handlers import channels  # noqa: E402


@pytest.fixture(autouse=True)
def configure_env(monkeypatch: pytest.MonkeyPatch):
    """Run every test without a completion credential unless it sets one."""

    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.delenv("COMPLETION_API_KEY", raising=False)
    monkeypatch.delenv("STATIC_DIR", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_channel_count():
    yield
    while channels.active:
        channels.release()


@pytest.fixture
def app():
    return create_app()
