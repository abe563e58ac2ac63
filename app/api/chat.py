# =============================================================================
# Chat API — Context-Augmented Assistant Replies
# =============================================================================
#
# ENDPOINTS:
#   POST /api/chat  — Answer a user message using uploaded documents
#
# This endpoint is thin: request validation, error mapping, and response
# mapping. The pipeline lives in app/services/assistant.py.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_chat_provider, get_document_store
from app.exceptions import UpstreamServiceError
from app.models.requests import ChatRequest
from app.models.responses import ChatResponse
from app.services.assistant import answer
from app.services.llm import LLMProvider
from app.services.store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Chat with the assistant",
    description=(
        "Send a message. Text from uploaded files is added as context. "
        "The reply comes back with any emotion/tone metadata split out."
    ),
)
async def chat_endpoint(
    request: ChatRequest,
    store: DocumentStore = Depends(get_document_store),
    provider: LLMProvider = Depends(get_chat_provider),
) -> ChatResponse:
    """
    Error handling:
    - Chat service unreachable / non-2xx / empty → 503
    - Bad or missing META line → 200 with empty meta (not an error)
    """
    try:
        result = await answer(store, provider, request.user)
    except UpstreamServiceError as e:
        logger.error("Chat service error (status=%s): %s", e.status_code, e)
        raise HTTPException(
            status_code=503,
            detail="Chat service temporarily unavailable. Try again.",
        ) from e

    return ChatResponse(reply=result.reply, meta=result.meta)
