# =============================================================================
# API Dependencies — FastAPI Dependency Injection
# =============================================================================
#
#   get_document_store()  — the process-wide DocumentStore (app.state)
#   get_chat_provider()   — configured chat completion provider
#   get_speech_service()  — configured speech synthesizer
#
# Misconfiguration (unknown provider, missing API key) becomes a 503 here
# so handlers only deal with request-level failures.
# Tests swap any of these via app.dependency_overrides.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from app.services.llm import LLMProvider, get_llm_provider
from app.services.speech import GoogleSpeechSynthesizer, get_speech_synthesizer
from app.services.store import DocumentStore

logger = logging.getLogger(__name__)


def get_document_store(request: Request) -> DocumentStore:
    """The single store created in the application lifespan."""
    return request.app.state.document_store


def get_chat_provider() -> LLMProvider:
    try:
        return get_llm_provider()
    except ValueError as e:
        logger.error("Chat provider configuration error: %s", e)
        raise HTTPException(
            status_code=503,
            detail=f"Service configuration error: {e}",
        ) from e


def get_speech_service() -> GoogleSpeechSynthesizer:
    try:
        return get_speech_synthesizer()
    except ValueError as e:
        logger.error("Speech service configuration error: %s", e)
        raise HTTPException(
            status_code=503,
            detail=f"Service configuration error: {e}",
        ) from e
