"""
Pydantic schemas for HTTP API requests and responses.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class APIResponse(BaseModel):
    """Envelope every JSON response is wrapped in."""

    success: bool
    message: str
    data: Any = None


class GenerateSpeechRequest(BaseModel):
    """Speech generation request."""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    voice_id: str | None = Field(default=None, alias="voiceId")


class NarrateCaseRequest(BaseModel):
    """Case narration request: the description plus its clues."""

    description: str
    clues: list[str] = Field(default_factory=list)
