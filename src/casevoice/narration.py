"""Narration of detective cases.

Produces the audio a case is stored with: one narration track for the case
description and one clip per clue. Missing audio never fails the case; the
game simply shows the text without sound.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .speech.gateway import SpeechGateway

logger = logging.getLogger(__name__)


@dataclass
class CaseNarration:
    """Audio generated for one case.

    Attributes:
        narration: MP3 audio for the case description, None if unavailable
        clues: MP3 audio per clue in clue order, None where unavailable
    """

    narration: bytes | None = None
    clues: list[bytes | None] = field(default_factory=list)

    @property
    def missing(self) -> int:
        """Number of tracks that have no audio."""
        return (self.narration is None) + sum(1 for clip in self.clues if clip is None)


class NarrationService:
    """Generates case narration through the speech gateway."""

    def __init__(self, gateway: SpeechGateway, voice: str | None = None) -> None:
        self.gateway = gateway
        self.voice = voice

    async def narrate(self, text: str) -> bytes | None:
        """Synthesize a single narration, returning None when no audio is available."""
        result = await self.gateway.synthesize(text, self.voice)
        return result.audio

    async def narrate_case(
        self, description: str, clues: Sequence[str] = ()
    ) -> CaseNarration:
        """Synthesize a case description and all of its clues concurrently.

        Args:
            description: Case description read out when the case opens
            clues: Clue texts, in the order they are stored

        Returns:
            CaseNarration with None wherever synthesis produced nothing
        """
        results = await asyncio.gather(
            self.narrate(description), *(self.narrate(clue) for clue in clues)
        )
        narration = CaseNarration(narration=results[0], clues=list(results[1:]))

        if narration.missing:
            logger.info(
                f"Case narrated with {narration.missing} of {len(results)} "
                "tracks missing audio"
            )
        return narration
