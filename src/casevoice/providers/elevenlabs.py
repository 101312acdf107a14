"""ElevenLabs text-to-speech provider implementation."""

import asyncio
import logging
import os
import re
from typing import TYPE_CHECKING

from elevenlabs.client import ElevenLabs

from ..speech.errors import TTSAPIError, TTSAuthError
from ..speech.models import VoiceSettings
from .base import SpeechProvider
from .local import is_neural_voice

if TYPE_CHECKING:
    from ..config import CasevoiceConfig

logger = logging.getLogger(__name__)

DEFAULT_VOICE = "Hyidyy6OA9R3GpDKGwoZ"
DEFAULT_MODEL = "eleven_multilingual_v2"
OUTPUT_FORMAT = "mp3_44100_128"


def _status_code(error: Exception) -> int | None:
    """Extract an HTTP status code from an SDK error, if it carries one."""
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    message = str(error).lower()
    if "unauthorized" in message or "401" in message:
        return 401
    if "429" in message:
        return 429
    server_error = re.search(r"\b5\d\d\b", message)
    if server_error:
        return int(server_error.group())
    return None


class ElevenLabsProvider(SpeechProvider):
    """ElevenLabs cloud provider, the paid safety net behind the local tier.

    Sends one request per synthesis with the text, model and voice settings
    and returns the MP3 body.
    """

    name = "elevenlabs"

    def __init__(
        self,
        api_key: str | None = None,
        default_voice: str = DEFAULT_VOICE,
        model_id: str = DEFAULT_MODEL,
        voice_settings: VoiceSettings | None = None,
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            default_voice: Voice ID used when the request has no usable hint
            model_id: ElevenLabs model ID
            voice_settings: Voice tuning sent with every request

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}", e) from e

        self.default_voice = default_voice
        self.model_id = model_id
        self.voice_settings = voice_settings or VoiceSettings()

        # Cache for voices to avoid repeated API calls
        self._voices_cache: list[dict] | None = None

    @classmethod
    def from_config(cls, config: "CasevoiceConfig") -> "ElevenLabsProvider":
        return cls(
            api_key=config.cloud.api_key,
            default_voice=config.cloud.voice,
            model_id=config.cloud.model,
        )

    def voices_for(self, hint: str | None) -> list[str]:
        """Use the hint as a voice ID unless it names a local neural voice."""
        if hint and not is_neural_voice(hint):
            return [hint]
        return [self.default_voice]

    async def synthesize(self, text: str, voice: str) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice ID to use for synthesis

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            TTSAPIError: If API call fails or returns no audio
            TTSAuthError: If authentication fails
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        voice = voice or self.default_voice

        # Run synchronous ElevenLabs client in thread to avoid blocking event loop
        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(
                text=text,
                voice_id=voice,
                model_id=self.model_id,
                voice_settings=self.voice_settings.to_dict(),
                output_format=OUTPUT_FORMAT,
            )
            # Collect all audio chunks
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            status = _status_code(e)
            if status == 401:
                raise TTSAuthError(f"Authentication failed: {e}", e) from e
            elif status == 429:
                raise TTSAPIError(f"Rate limit exceeded: {e}", 429, e) from e
            elif status is not None and status >= 500:
                raise TTSAPIError(f"Server error: {e}", status, e) from e
            else:
                raise TTSAPIError(f"API call failed: {e}", status, e) from e

        if not audio_bytes:
            raise TTSAPIError("No audio data received from API")

        logger.debug(f"ElevenLabs returned {len(audio_bytes)} bytes for voice {voice}")
        return audio_bytes

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.

        Returns:
            List of voice dictionaries with id, name, and provider fields

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
        """
        if self._voices_cache is not None:
            return self._voices_cache

        def _sync_get_voices() -> list[dict]:
            response = self._client.voices.get_all()
            return [
                {"id": voice.voice_id, "name": voice.name, "provider": self.name}
                for voice in response.voices
            ]

        try:
            voices = await asyncio.to_thread(_sync_get_voices)
        except Exception as e:
            if _status_code(e) == 401:
                raise TTSAuthError(f"Authentication failed: {e}", e) from e
            raise TTSAPIError(f"Failed to list voices: {e}", _status_code(e), e) from e

        self._voices_cache = voices
        return voices
