"""Pytest configuration and fixtures for casevoice tests."""

import sys
from collections import Counter
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from casevoice import config as config_module
from casevoice.cache import SpeechCache
from casevoice.providers.base import SpeechProvider
from casevoice.speech.errors import TTSEngineError
from casevoice.speech.gateway import SpeechGateway

ENV_VARS = [
    "CASEVOICE_CONFIG",
    "CASEVOICE_TIERS",
    "CASEVOICE_MAX_TEXT_LENGTH",
    "CASEVOICE_LOCAL_TIMEOUT",
    "CASEVOICE_LOCAL_VOICES",
    "CASEVOICE_CLOUD_VOICE",
    "CASEVOICE_CLOUD_MODEL",
    "CASEVOICE_CACHE_MAX_ENTRIES",
    "CASEVOICE_HTTP_HOST",
    "CASEVOICE_HTTP_PORT",
    "CASEVOICE_API_KEY",
    "ELEVENLABS_API_KEY",
]


class FakeProvider(SpeechProvider):
    """Scriptable provider that records every attempt.

    Voices listed in ``failing`` raise TTSEngineError, voices in ``empty``
    return b"", every other voice returns ``audio``.
    """

    def __init__(
        self,
        name: str = "fake",
        voices: Iterable[str] = ("voice-a",),
        audio: bytes = b"ID3-fake-audio",
        failing: Iterable[str] = (),
        empty: Iterable[str] = (),
    ) -> None:
        self.name = name
        self.voices = list(voices)
        self.audio = audio
        self.failing = set(failing)
        self.empty = set(empty)
        self.calls: list[tuple[str, str]] = []

    @classmethod
    def from_config(cls, config) -> "FakeProvider":
        return cls()

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def calls_per_voice(self) -> Counter:
        return Counter(voice for _, voice in self.calls)

    def voices_for(self, hint: str | None) -> list[str]:
        return list(self.voices)

    async def synthesize(self, text: str, voice: str) -> bytes:
        self.calls.append((text, voice))
        if voice in self.failing:
            raise TTSEngineError(f"{voice} is broken", returncode=1)
        if voice in self.empty:
            return b""
        return self.audio

    async def list_voices(self) -> list[dict]:
        return [{"id": v, "name": v, "provider": self.name} for v in self.voices]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path) -> Path:
    """Keep tests away from the real config file, env and memoized config."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_path = tmp_path / "config" / "config.toml"
    monkeypatch.setenv("CASEVOICE_CONFIG", str(config_path))
    monkeypatch.setattr(config_module, "_cached_config", None)
    return config_path


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def make_gateway() -> Callable[..., SpeechGateway]:
    """Factory for gateways over fake providers with a small cache."""

    def _make(
        *providers: SpeechProvider,
        max_entries: int = 100,
        max_text_length: int = 5000,
    ) -> SpeechGateway:
        return SpeechGateway(
            providers=list(providers),
            cache=SpeechCache(max_entries=max_entries),
            max_text_length=max_text_length,
        )

    return _make
