"""REST routes for voice message finalization."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from core.auth import AuthContext, require_auth_context
from core.exceptions import AuthorizationError, NotFoundError, ServiceError, ValidationError
from core.http.errors import error_payload, error_response_for
from core.pydantic_schemas import ApiResponse, error_response, ok as api_ok
from features.voice_messages.dependencies import get_voice_message_service
from features.voice_messages.schemas import FinalizeVoiceMessageRequest, FinalizeVoiceMessageResponse
from features.voice_messages.service import VoiceMessageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/voice-message", tags=["voice-messages"])

FINALIZE_FAILED_MESSAGE = "Failed to finalize voice message"


@router.post("/finalize", response_model=ApiResponse[FinalizeVoiceMessageResponse])
async def finalize_voice_message_endpoint(
    request: FinalizeVoiceMessageRequest,
    auth: AuthContext = Depends(require_auth_context),
    service: VoiceMessageService = Depends(get_voice_message_service),
) -> Any:
    """Transcribe, personalize and synthesize a voice message for each recipient."""

    message_id = (request.message_id or "").strip()
    if not message_id:
        return error_response(status.HTTP_400_BAD_REQUEST, "Missing messageId")

    try:
        outcome = await service.finalize(message_id=message_id, caller_id=auth["user_id"])
    except ValidationError as exc:
        logger.warning("Voice message %s rejected: %s", message_id, exc)
        return error_response_for(exc)
    except NotFoundError as exc:
        return error_response_for(exc)
    except AuthorizationError as exc:
        logger.warning("User %s may not finalize message %s", auth["user_id"], message_id)
        return error_response_for(exc)
    except ServiceError as exc:
        logger.error("Voice message %s finalization error: %s", message_id, exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            FINALIZE_FAILED_MESSAGE,
            error_payload(exc),
        )
    except Exception:
        logger.exception("Unexpected error finalizing voice message %s", message_id)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, FINALIZE_FAILED_MESSAGE)

    return api_ok("Voice message finalized", data=outcome.to_payload())


__all__ = ["router"]
