# =============================================================================
# Speech API — Text-to-Speech
# =============================================================================
#
# ENDPOINTS:
#   POST /api/tts  — Synthesize speech for the assistant's reply
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_speech_service
from app.exceptions import UpstreamServiceError
from app.models.requests import SpeechRequest
from app.models.responses import SpeechResponse
from app.services.speech import GoogleSpeechSynthesizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Speech"])


@router.post(
    "/tts",
    response_model=SpeechResponse,
    summary="Synthesize speech",
    description="Convert up to 1000 characters of text into base64-encoded audio.",
)
async def tts_endpoint(
    request: SpeechRequest,
    synthesizer: GoogleSpeechSynthesizer = Depends(get_speech_service),
) -> SpeechResponse:
    try:
        result = await synthesizer.synthesize(request.text)
    except UpstreamServiceError as e:
        logger.error("TTS error (status=%s): %s", e.status_code, e)
        raise HTTPException(status_code=503, detail="TTS failed") from e

    return SpeechResponse(
        audio_content=result.audio_content,
        audio_encoding=result.audio_encoding,
    )
