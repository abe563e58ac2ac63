# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming INTO the API.
# Uploads arrive as multipart form data and have no body model here.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """
    Request body for POST /api/chat.

    Example:
        {"user": "What does the contract say about termination?"}
    """

    # Any length is accepted, including empty
    user: str = Field(
        default="",
        description="The user's message to the assistant",
        examples=["Summarise the file I just uploaded."],
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"user": "Hello, who are you?"},
                {"user": "What are the key dates in my uploaded notes?"},
            ]
        }
    )


class SpeechRequest(BaseModel):
    """Request body for POST /api/tts."""

    # Longer input is accepted and cut to settings.tts_max_chars
    text: str = Field(
        default="",
        description="Text to speak. Empty text speaks a short greeting.",
        examples=["Hi there, I'm ready."],
    )
