"""Speech data models with validation."""

from dataclasses import asdict, dataclass

CACHE_TIER = "cache"


@dataclass
class VoiceSettings:
    """Cloud voice generation settings.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
    """

    stability: float = 0.5
    similarity_boost: float = 0.75
    style: float = 0.0
    use_speaker_boost: bool = True

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")

    def to_dict(self) -> dict:
        """Return the settings in the shape the cloud API expects."""
        return asdict(self)


@dataclass(frozen=True)
class SynthesisResult:
    """Outcome of a synthesis request.

    Either carries MP3 audio together with the tier and voice that produced
    it, or is explicitly unavailable with a reason. Callers check ``ok``
    instead of catching exceptions: missing audio is a normal outcome.

    Args:
        audio: Synthesized audio bytes, None when unavailable
        tier: Name of the tier that produced the audio ("cache" for hits)
        voice: Voice identifier used, when known
        cached: True if the audio was served from the cache
        reason: Why no audio is available (only set when unavailable)
    """

    audio: bytes | None = None
    tier: str | None = None
    voice: str | None = None
    cached: bool = False
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.audio is not None and not self.audio:
            raise ValueError("audio cannot be empty; use SynthesisResult.unavailable()")

    @property
    def ok(self) -> bool:
        return self.audio is not None

    @classmethod
    def unavailable(cls, reason: str) -> "SynthesisResult":
        """Build an explicit no-audio result."""
        return cls(audio=None, reason=reason)
