"""FastAPI application exposing the speech gateway.

Routes:
- GET  /status                  - Version, tiers and cache usage
- POST /api/speech/generate     - Synthesize text, returns audio/mpeg
- GET  /api/speech/cache-stats  - Number of cached phrases
- POST /api/speech/clear-cache  - Drop all cached audio
- POST /api/speech/narrate      - Narrate a case description and its clues

JSON responses use the {success, message, data} envelope. When
CASEVOICE_API_KEY is set, every route requires a matching X-API-Key header.
"""

import base64
import hmac
import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import CasevoiceConfig, load_config
from ..narration import NarrationService
from ..speech.gateway import SpeechGateway
from .schemas import APIResponse, GenerateSpeechRequest, NarrateCaseRequest

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = (
    "Speech synthesis is temporarily unavailable. The game continues without sound."
)


def envelope(
    success: bool, message: str, data: Any = None, status_code: int = 200
) -> JSONResponse:
    """Wrap a payload in the standard response envelope."""
    body = APIResponse(success=success, message=message, data=data)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def _encode(audio: bytes | None) -> str | None:
    return base64.b64encode(audio).decode("ascii") if audio is not None else None


def create_app(
    config: CasevoiceConfig | None = None, gateway: SpeechGateway | None = None
) -> FastAPI:
    """Create the HTTP application.

    Args:
        config: Configuration (loaded from disk/env if omitted)
        gateway: Gateway to serve (built from config if omitted)
    """
    config = config or load_config()
    gateway = gateway or SpeechGateway.from_config(config)
    narration = NarrationService(gateway)

    app = FastAPI(title="casevoice", version=__version__)
    app.state.config = config
    app.state.gateway = gateway

    async def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        expected = config.http.api_key
        if expected and not hmac.compare_digest(
            (x_api_key or "").encode(), expected.encode()
        ):
            raise HTTPException(
                status_code=401, detail="Invalid or missing API key (X-API-Key header)"
            )

    router = APIRouter(dependencies=[Depends(require_api_key)])

    @router.get("/status")
    async def status() -> JSONResponse:
        return envelope(
            True,
            "casevoice is running",
            {
                "version": __version__,
                "tiers": gateway.tiers,
                "cachedItems": gateway.cache_size(),
                "maxEntries": gateway.cache.max_entries,
            },
        )

    @router.post("/api/speech/generate")
    async def generate_speech(request: GenerateSpeechRequest) -> Response:
        if not request.text.strip():
            return envelope(False, "Text cannot be empty", status_code=400)

        logger.info(f"Speech requested (length: {len(request.text)})")
        result = await gateway.synthesize(request.text, request.voice_id)

        if not result.ok:
            logger.warning(f"No speech available: {result.reason}")
            return envelope(
                False, UNAVAILABLE_MESSAGE, {"reason": result.reason}, status_code=503
            )

        return Response(
            content=result.audio,
            media_type="audio/mpeg",
            headers={
                "Content-Disposition": 'inline; filename="speech.mp3"',
                "X-Speech-Tier": result.tier or "",
                "X-Speech-Voice": result.voice or "",
                "X-Speech-Cached": "true" if result.cached else "false",
            },
        )

    @router.get("/api/speech/cache-stats")
    async def cache_stats() -> JSONResponse:
        return envelope(
            True,
            "Speech cache statistics",
            {
                "cachedItems": gateway.cache_size(),
                "maxEntries": gateway.cache.max_entries,
            },
        )

    @router.post("/api/speech/clear-cache")
    async def clear_cache() -> JSONResponse:
        cleared = gateway.clear_cache()
        logger.info(f"Speech cache cleared via API ({cleared} entries)")
        return envelope(True, "Speech cache cleared", {"cleared": cleared})

    @router.post("/api/speech/narrate")
    async def narrate_case(request: NarrateCaseRequest) -> JSONResponse:
        result = await narration.narrate_case(request.description, request.clues)
        message = (
            "Case narrated"
            if not result.missing
            else f"Case narrated, {result.missing} track(s) without sound"
        )
        return envelope(
            True,
            message,
            {
                "narration": _encode(result.narration),
                "clues": [_encode(clip) for clip in result.clues],
                "missing": result.missing,
            },
        )

    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return envelope(False, str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return envelope(
            False, "Invalid request", {"errors": exc.errors()}, status_code=422
        )

    return app
