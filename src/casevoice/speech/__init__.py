"""Speech synthesis package for casevoice.

Holds the fallback gateway together with its result type and error family.
"""

from .errors import TTSAPIError, TTSAuthError, TTSEngineError, TTSError, TTSTimeoutError
from .models import SynthesisResult, VoiceSettings

__all__ = [
    "SpeechGateway",
    "SynthesisResult",
    "TTSAPIError",
    "TTSAuthError",
    "TTSEngineError",
    "TTSError",
    "TTSTimeoutError",
    "VoiceSettings",
]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    # gateway imports providers, which import this package's errors
    if name == "SpeechGateway":
        from .gateway import SpeechGateway

        return SpeechGateway
    raise AttributeError(f"module 'casevoice.speech' has no attribute {name!r}")
