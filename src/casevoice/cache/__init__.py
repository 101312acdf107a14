"""In-memory caching of synthesized speech."""

from .memory import DEFAULT_MAX_ENTRIES, SpeechCache
from .models import SpeechCacheEntry

__all__ = ["DEFAULT_MAX_ENTRIES", "SpeechCache", "SpeechCacheEntry"]
