"""Bounded in-memory cache of synthesized speech."""

import logging
import threading

from .models import SpeechCacheEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100

CacheKey = tuple[str | None, str]


class SpeechCache:
    """Exact-match text to audio cache with a hard entry ceiling.

    Entries are keyed by the synthesized text and the caller's voice hint.
    Once ``max_entries`` is reached new results are simply not stored; nothing
    is evicted. Entries are never modified after insertion, so the lock only
    has to protect the dict itself.

    Example:
        cache = SpeechCache(max_entries=100)
        if (entry := cache.get("The body was found at dawn.")) is None:
            audio = await provider.synthesize("The body was found at dawn.", voice)
            cache.put("The body was found at dawn.", audio, tier="local")
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        """Initialize an empty cache.

        Args:
            max_entries: Maximum number of entries ever held at once

        Raises:
            ValueError: If max_entries is not positive
        """
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self.max_entries = max_entries
        self._entries: dict[CacheKey, SpeechCacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(text: str, voice: str | None) -> CacheKey:
        return (voice or None, text)

    def get(self, text: str, voice: str | None = None) -> SpeechCacheEntry | None:
        """Look up cached audio for exactly this text and voice hint.

        Returns:
            The cached entry, or None on a miss
        """
        with self._lock:
            return self._entries.get(self._key(text, voice))

    def put(
        self,
        text: str,
        audio: bytes,
        voice: str | None = None,
        tier: str | None = None,
        produced_by: str | None = None,
    ) -> bool:
        """Store audio for a text unless the cache is full.

        Args:
            text: Text the audio was synthesized from
            audio: Non-empty audio bytes
            voice: Voice hint the request carried
            tier: Tier that produced the audio
            produced_by: Voice the tier used

        Returns:
            True if a new entry was stored, False if the key was already
            present or the cache is at capacity

        Raises:
            ValueError: If audio is empty
        """
        if not audio:
            raise ValueError("Cannot cache empty audio")

        key = self._key(text, voice)
        with self._lock:
            if key in self._entries:
                return False
            if len(self._entries) >= self.max_entries:
                logger.debug(
                    f"Speech cache full ({self.max_entries} entries), not caching "
                    f"text of length {len(text)}"
                )
                return False
            self._entries[key] = SpeechCacheEntry(
                text=text,
                voice=key[0],
                audio=audio,
                tier=tier,
                produced_by=produced_by,
            )
            return True

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        logger.info(f"Speech cache cleared ({dropped} entries)")
        return dropped

    def size(self) -> int:
        """Return the current number of entries."""
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, text: object) -> bool:
        if not isinstance(text, str):
            return False
        return self.get(text) is not None
