"""Provider abstraction for speech synthesis tiers.

This module provides a registry pattern for managing speech providers and
assembling them into the ordered fallback ladder the gateway walks.
"""

import logging
from typing import TYPE_CHECKING, ClassVar

from ..speech.errors import TTSAuthError
from .base import SpeechProvider
from .elevenlabs import ElevenLabsProvider
from .local import LocalProcessProvider

if TYPE_CHECKING:
    from ..config import CasevoiceConfig

__all__ = [
    "ElevenLabsProvider",
    "LocalProcessProvider",
    "ProviderRegistry",
    "SpeechProvider",
]

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry for managing speech providers.

    This class maintains a registry of available providers, allowing
    registration and retrieval by tier name.
    """

    _providers: ClassVar[dict[str, type[SpeechProvider]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type[SpeechProvider]) -> None:
        """Register a speech provider.

        Args:
            name: Tier name to register the provider under
            provider_class: Provider class that implements SpeechProvider
        """
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type[SpeechProvider]:
        """Get a provider class by name.

        Args:
            name: Name of the provider to retrieve

        Returns:
            Provider class

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def names(cls) -> list[str]:
        """Return the registered tier names in registration order."""
        return list(cls._providers)

    @classmethod
    def build_ladder(cls, config: "CasevoiceConfig") -> list[SpeechProvider]:
        """Instantiate the configured tiers in fallback order.

        Tiers that cannot be offered (for example the cloud tier without an
        API key) are left out rather than failing startup.

        Args:
            config: Application configuration

        Returns:
            Provider instances in the order they should be tried

        Raises:
            KeyError: If a configured tier name is not registered
        """
        ladder: list[SpeechProvider] = []
        for name in config.speech.tiers:
            provider_class = cls.get(name)
            try:
                ladder.append(provider_class.from_config(config))
            except TTSAuthError as e:
                logger.info(f"Speech tier '{name}' not offered: {e}")
        logger.debug(f"Speech ladder: {[p.name for p in ladder] or 'empty'}")
        return ladder


# Register providers
ProviderRegistry.register("local", LocalProcessProvider)
ProviderRegistry.register("elevenlabs", ElevenLabsProvider)
