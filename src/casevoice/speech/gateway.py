"""Speech synthesis gateway.

Walks the provider ladder (local engine, then cloud) for a piece of text,
memoizing successful results in a bounded SpeechCache. Running out of tiers
is a normal outcome reported through SynthesisResult, never an exception.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..cache import SpeechCache
from ..providers.base import SpeechProvider
from .errors import TTSError
from .models import CACHE_TIER, SynthesisResult

if TYPE_CHECKING:
    from ..config import CasevoiceConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_TEXT_LENGTH = 5000

InflightKey = tuple[str | None, str]


class SpeechGateway:
    """Turns text into MP3 audio, degrading across tiers instead of failing.

    For each request the gateway:
      1. truncates text longer than ``max_text_length``,
      2. returns a cached result for the exact same text and voice hint,
      3. tries each provider in order, and each voice that provider offers
         for the hint, stopping at the first non-empty audio,
      4. otherwise returns ``SynthesisResult.unavailable``.

    Concurrent requests for the same text share a single ladder run.

    Example:
        gateway = SpeechGateway(
            providers=[LocalProcessProvider(), ElevenLabsProvider()],
            cache=SpeechCache(max_entries=100),
        )
        result = await gateway.synthesize("Inspector, the butler is missing.")
        if result.ok:
            case.narration_audio = result.audio
    """

    def __init__(
        self,
        providers: Sequence[SpeechProvider],
        cache: SpeechCache | None = None,
        max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
    ) -> None:
        """Initialize the gateway.

        Args:
            providers: Tiers in the order they should be tried
            cache: Cache to memoize results in (a default-sized one if omitted)
            max_text_length: Text beyond this many characters is dropped

        Raises:
            ValueError: If max_text_length is not positive
        """
        if max_text_length <= 0:
            raise ValueError(f"max_text_length must be positive, got {max_text_length}")

        self.providers = list(providers)
        self.cache = cache if cache is not None else SpeechCache()
        self.max_text_length = max_text_length
        self._inflight: dict[InflightKey, asyncio.Task[SynthesisResult]] = {}

        if not self.providers:
            logger.warning("Speech gateway has no providers; all requests will be silent")

    @classmethod
    def from_config(cls, config: "CasevoiceConfig") -> "SpeechGateway":
        """Build a gateway with the configured tiers and cache size."""
        from ..providers import ProviderRegistry

        return cls(
            providers=ProviderRegistry.build_ladder(config),
            cache=SpeechCache(max_entries=config.cache.max_entries),
            max_text_length=config.speech.max_text_length,
        )

    @property
    def tiers(self) -> list[str]:
        return [provider.name for provider in self.providers]

    def prepare_text(self, text: str) -> str:
        """Apply the length ceiling to a request's text."""
        if len(text) > self.max_text_length:
            logger.info(
                f"Truncating text from {len(text)} to {self.max_text_length} characters"
            )
            return text[: self.max_text_length]
        return text

    async def synthesize(self, text: str, voice: str | None = None) -> SynthesisResult:
        """Synthesize text, falling back across tiers.

        Args:
            text: Text to speak
            voice: Optional voice hint; each tier decides whether it applies

        Returns:
            SynthesisResult with audio, or an unavailable result

        Raises:
            TypeError: If text is None or not a string
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be a string, got {type(text).__name__}")

        if not text.strip():
            logger.warning("Speech synthesis requested for empty text")
            return SynthesisResult.unavailable("Text is empty")

        text = self.prepare_text(text)
        voice = voice or None

        entry = self.cache.get(text, voice)
        if entry is not None:
            logger.debug(f"Speech cache hit for text of length {len(text)}")
            return SynthesisResult(
                audio=entry.audio,
                tier=CACHE_TIER,
                voice=entry.produced_by,
                cached=True,
            )

        key: InflightKey = (voice, text)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run_ladder(text, voice))
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        else:
            logger.debug(f"Joining in-flight synthesis for text of length {len(text)}")

        # Shield so one caller going away does not cancel the others' work
        return await asyncio.shield(task)

    async def _run_ladder(self, text: str, voice: str | None) -> SynthesisResult:
        for provider in self.providers:
            for candidate in provider.voices_for(voice):
                audio = await self._attempt(provider, text, candidate)
                if audio is None:
                    continue

                stored = self.cache.put(
                    text, audio, voice=voice, tier=provider.name, produced_by=candidate
                )
                logger.info(
                    f"Synthesized {len(audio)} bytes with {provider.name}/{candidate}"
                    f"{'' if stored else ' (not cached)'}"
                )
                return SynthesisResult(audio=audio, tier=provider.name, voice=candidate)

        logger.warning(
            f"No speech tier produced audio for text of length {len(text)}; "
            "continuing without sound"
        )
        return SynthesisResult.unavailable("All speech tiers failed")

    async def _attempt(
        self, provider: SpeechProvider, text: str, voice: str
    ) -> bytes | None:
        """Run one provider/voice attempt, turning every failure into None."""
        try:
            audio = await provider.synthesize(text, voice)
        except TTSError as e:
            logger.warning(f"{provider.name} failed with voice {voice}: {e}")
            return None
        except Exception:
            logger.exception(f"{provider.name} raised unexpectedly with voice {voice}")
            return None

        if not audio:
            logger.warning(f"{provider.name} returned no audio with voice {voice}")
            return None
        return audio

    def clear_cache(self) -> int:
        """Drop all cached audio and return how many entries were removed."""
        return self.cache.clear()

    def cache_size(self) -> int:
        """Return the number of cached entries."""
        return self.cache.size()
