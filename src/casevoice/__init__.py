"""casevoice - speech synthesis gateway for detective case narration."""

__version__ = "0.1.0"
__all__ = ["SpeechCache", "SpeechGateway", "SynthesisResult"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "SpeechGateway":
        from .speech.gateway import SpeechGateway

        return SpeechGateway
    if name == "SpeechCache":
        from .cache import SpeechCache

        return SpeechCache
    if name == "SynthesisResult":
        from .speech.models import SynthesisResult

        return SynthesisResult
    raise AttributeError(f"module 'casevoice' has no attribute {name!r}")
