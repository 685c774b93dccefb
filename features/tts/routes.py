"""REST route serving text-to-speech playback clips."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from core.auth import AuthContext, require_auth_context
from core.exceptions import ServiceError, ValidationError
from core.http.errors import error_response_for
from features.tts.dependencies import get_speech_service
from features.tts.schemas import SpeechRequest
from features.tts.service import SpeechSynthesisService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["TTS"])

CLIP_CACHE_CONTROL = "private, max-age=86400"


@router.post(
    "/tts",
    summary="Synthesize a playback clip",
    response_class=Response,
    responses={200: {"content": {"audio/mpeg": {}}}},
)
async def tts_endpoint(
    request: SpeechRequest,
    auth: AuthContext = Depends(require_auth_context),
    service: SpeechSynthesisService = Depends(get_speech_service),
) -> Response:
    """Return MP3 audio; ``X-TTS-Cache`` says whether it was served from cache."""

    try:
        clip = await service.synthesize(
            request.text,
            language=request.language,
            voice=request.voice,
            rate=request.rate,
        )
    except ValidationError as exc:
        logger.warning("TTS request from %s rejected: %s", auth["user_id"], exc)
        return error_response_for(exc)
    except ServiceError as exc:
        logger.error("TTS synthesis failed: %s", exc)
        return error_response_for(exc, "Failed to synthesize speech")

    return Response(
        content=clip.audio,
        media_type=clip.content_type,
        headers={"Cache-Control": CLIP_CACHE_CONTROL, "X-TTS-Cache": clip.cache_status},
    )


__all__ = ["router"]
