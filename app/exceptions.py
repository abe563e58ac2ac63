# =============================================================================
# Domain Exceptions
# =============================================================================
#
# Services raise these; the API layer maps them to HTTP responses.
#
#   AssistantError
#   ├── IngestionError        — unsupported or corrupt upload (store untouched)
#   ├── UpstreamServiceError  — chat/speech provider failed (no retry)
#   └── MetadataParseError    — bad META line; never leaves response_parser
# =============================================================================

from __future__ import annotations


class AssistantError(Exception):
    """Base exception for all assistant errors."""


class IngestionError(AssistantError):
    """An uploaded file could not be turned into text."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        super().__init__(message)
        self.filename = filename


class UpstreamServiceError(AssistantError):
    """An external chat or speech service was unreachable or returned an error."""

    def __init__(
        self,
        message: str,
        service: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class MetadataParseError(AssistantError):
    """The sentinel metadata line did not contain a JSON object."""
