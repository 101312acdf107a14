"""Abstract base class for speech synthesis providers.

This module defines the interface every tier of the fallback ladder
implements, so the gateway can walk the tiers without knowing whether a
tier runs a local process or calls a cloud API.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import CasevoiceConfig


class SpeechProvider(ABC):
    """Abstract base class for speech synthesis providers.

    All providers must inherit from this class and implement the required
    methods for building from config, synthesizing speech and listing voices.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,       # Unique identifier for the voice
            "name": str,     # Human-readable name for the voice
            "provider": str  # Name of the provider (e.g., "local", "elevenlabs")
        }
    """

    name: str = "provider"

    @classmethod
    @abstractmethod
    def from_config(cls, config: "CasevoiceConfig") -> "SpeechProvider":
        """Build a provider from application configuration.

        Raises:
            TTSAuthError: If the provider cannot be offered, e.g. because
                its credential is not configured
        """
        pass

    def voices_for(self, hint: str | None) -> list[str]:
        """Return the voices to attempt, in order, for one request.

        Args:
            hint: Voice the caller asked for, if any

        Returns:
            Ordered list of voice identifiers
        """
        return [hint] if hint else []

    @abstractmethod
    async def synthesize(self, text: str, voice: str) -> bytes:
        """Convert text to audio bytes.

        Args:
            text: The text to convert to speech
            voice: Voice identifier to use for synthesis

        Returns:
            Audio data as bytes (MP3)

        Raises:
            TTSError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this provider.

        Returns:
            List of voice dictionaries, each containing:
            - id: Unique voice identifier
            - name: Human-readable voice name
            - provider: Provider name
        """
        pass
