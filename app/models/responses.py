# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API.
# They are the contract with the browser client:
#   - /api/file  → UploadResponse
#   - /api/chat  → ChatResponse
#   - /api/tts   → SpeechResponse
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health — confirms the API is running."""

    status: str = "ok"
    version: str
    service: str
    documents: int = Field(description="Number of documents currently stored")


class UploadResponse(BaseModel):
    """
    Response for POST /api/file.

    `ok` is False (with `error` set) when the file could not be read.
    """

    ok: bool
    filename: str | None = None
    error: str | None = None


class ChatResponse(BaseModel):
    """Response for POST /api/chat — reply text plus model-emitted metadata."""

    reply: str = Field(description="Assistant reply with META lines removed")
    meta: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Metadata decoded from the model's META line, e.g. "
            '{"emotion": "happy", "tone": "upbeat"}. Empty when absent or invalid.'
        ),
    )


class SpeechResponse(BaseModel):
    """Response for POST /api/tts."""

    audio_content: str = Field(description="Base64-encoded audio")
    audio_encoding: str = Field(description="Audio encoding, e.g. MP3")
