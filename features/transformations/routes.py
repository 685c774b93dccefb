"""REST routes exposing text transformations and the per-message cache."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config.rate_limits import MAX_AUDIO_REQUEST_BYTES
from config.voice_messages import DEFAULT_SOURCE_LANGUAGE
from core.auth import AuthContext, require_auth_context
from core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from core.http.errors import error_response_for
from core.pydantic_schemas import ApiResponse, api_response, error_response, ok as api_ok
from features.chat.repositories import MessageRepository
from features.transformations.cache import (
    CacheStatus,
    TransformationCache,
    TransformationKind,
    TransformationRequest,
)
from features.transformations.dependencies import (
    get_chat_session,
    get_transformation_cache,
    get_transformation_service,
)
from features.transformations.rate_limiter import ApiGuard
from features.transformations.schemas import (
    AlternativesRequest,
    AlternativesResponse,
    CorrectionRequest,
    CorrectionResponse,
    MessageTransformationRequest,
    MessageTransformationResponse,
    ScaleRequest,
    ScaleResponse,
    TranscriptionResponse,
    TranslateRequest,
    TranslateResponse,
    TranslateWithAlternativesRequest,
    TranslateWithAlternativesResponse,
)
from features.transformations.service import TextTransformationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["transformations"])


def _service_error_response(exc: ServiceError, failure_message: str) -> JSONResponse:
    if isinstance(exc, (ValidationError, NotFoundError, AuthorizationError)):
        logger.warning("Transformation request rejected: %s", exc)
        return error_response_for(exc)
    logger.error("Transformation failed: %s", exc)
    return error_response_for(exc, failure_message)


@router.post(
    "/translate",
    response_model=ApiResponse[TranslateResponse],
    dependencies=[Depends(ApiGuard("translate"))],
)
async def translate_endpoint(
    request: TranslateRequest,
    service: TextTransformationService = Depends(get_transformation_service),
) -> Any:
    try:
        result = await service.translate(request.text, request.source_lang, request.target_lang)
    except ServiceError as exc:
        return _service_error_response(exc, "Translation failed")
    return api_ok("Text translated", data=TranslateResponse(**result).model_dump())


@router.post(
    "/scale",
    response_model=ApiResponse[ScaleResponse],
    dependencies=[Depends(ApiGuard("scale"))],
)
async def scale_endpoint(
    request: ScaleRequest,
    service: TextTransformationService = Depends(get_transformation_service),
) -> Any:
    try:
        result = await service.scale(request.text, request.target_level, request.language)
    except ServiceError as exc:
        return _service_error_response(exc, "Failed to scale text complexity")
    return api_ok("Text scaled", data=ScaleResponse(**result).model_dump(by_alias=True))


@router.post(
    "/correction",
    response_model=ApiResponse[CorrectionResponse],
    dependencies=[Depends(ApiGuard("correction"))],
)
async def correction_endpoint(
    request: CorrectionRequest,
    service: TextTransformationService = Depends(get_transformation_service),
) -> Any:
    try:
        result = await service.correct(request.text, request.feedback_language)
    except ServiceError as exc:
        return _service_error_response(exc, "Failed to get corrections")
    return api_ok("Text analysed", data=CorrectionResponse(**result).model_dump(by_alias=True))


@router.post(
    "/alternatives",
    response_model=ApiResponse[AlternativesResponse],
    dependencies=[Depends(ApiGuard("alternatives"))],
)
async def alternatives_endpoint(
    request: AlternativesRequest,
    service: TextTransformationService = Depends(get_transformation_service),
) -> Any:
    try:
        result = await service.alternatives(request.text, request.context)
    except ServiceError as exc:
        return _service_error_response(exc, "Failed to generate alternatives")
    return api_ok("Alternatives generated", data=AlternativesResponse(**result).model_dump())


@router.post(
    "/translate-with-alternatives",
    response_model=ApiResponse[TranslateWithAlternativesResponse],
    dependencies=[Depends(ApiGuard("translate-with-alternatives"))],
)
async def translate_with_alternatives_endpoint(
    request: TranslateWithAlternativesRequest,
    service: TextTransformationService = Depends(get_transformation_service),
) -> Any:
    try:
        result = await service.translate_with_alternatives(request.text, request.target_language)
    except ServiceError as exc:
        return _service_error_response(exc, "Failed to translate")
    return api_ok(
        "Text translated",
        data=TranslateWithAlternativesResponse(**result).model_dump(by_alias=True),
    )


@router.post(
    "/transcribe",
    response_model=ApiResponse[TranscriptionResponse],
    dependencies=[Depends(ApiGuard("transcribe", preset="ai_transcribe", max_body_bytes=MAX_AUDIO_REQUEST_BYTES))],
)
async def transcribe_endpoint(
    audio: UploadFile | None = File(None),
    service: TextTransformationService = Depends(get_transformation_service),
) -> Any:
    if audio is None:
        return error_response(status.HTTP_400_BAD_REQUEST, "Missing audio file")

    data = await audio.read()
    try:
        result = await service.transcribe(data, mime_type=audio.content_type, filename=audio.filename)
    except ServiceError as exc:
        return _service_error_response(exc, "Transcription failed")
    return api_ok("Audio transcribed", data=TranscriptionResponse(**result).model_dump())


@router.post("/transformations", dependencies=[Depends(ApiGuard("transformations"))])
async def message_transformation_endpoint(
    request: MessageTransformationRequest,
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_chat_session),
    cache: TransformationCache = Depends(get_transformation_cache),
) -> Any:
    """Return the caller's translation or scaled text for a stored message.

    Answers 202 with ``status: pending`` while the underlying call waits in the
    retry queue; clients poll again later.
    """

    message = await MessageRepository(session).get_message(request.message_id)
    if message is None:
        return error_response_for(NotFoundError(f"Message {request.message_id} not found", resource="message"))

    transformation = TransformationRequest(
        kind=TransformationKind(request.kind),
        message_id=message.id,
        source_text=message.original_text or "",
        source_language=message.original_language or DEFAULT_SOURCE_LANGUAGE,
        target_language=request.target_language,
        target_proficiency=request.target_proficiency,
        sender_id=message.sender_id,
        viewer_id=auth["user_id"],
        bypass=bool(message.bypass_recipient_preferences),
    )
    if not transformation.source_text.strip() and not transformation.should_skip:
        return error_response(status.HTTP_400_BAD_REQUEST, "Message has no text to transform")

    try:
        outcome = await cache.get_or_create(transformation)
    except ServiceError as exc:
        return _service_error_response(exc, "Transformation failed")

    payload: Dict[str, Any] = MessageTransformationResponse(
        message_id=message.id,
        status=outcome.status.value,
        text=outcome.text,
    ).model_dump(by_alias=True)
    if outcome.status is CacheStatus.PENDING:
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=api_response(code=status.HTTP_202_ACCEPTED, message="Transformation queued", data=payload),
        )
    return api_ok("Transformation ready", data=payload)


__all__ = ["router"]
