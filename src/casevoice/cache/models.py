"""Data models for the speech cache."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SpeechCacheEntry:
    """Cached synthesis result.

    Attributes:
        text: Input text the audio was synthesized from (after truncation)
        voice: Voice hint the caller asked for, None for the default voices
        audio: Synthesized MP3 bytes
        tier: Tier that produced the audio (e.g., "local", "elevenlabs")
        produced_by: Voice identifier the tier actually used
        timestamp: When this entry was created
    """

    text: str
    voice: str | None
    audio: bytes
    tier: str | None = None
    produced_by: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
