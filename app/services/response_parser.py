# =============================================================================
# Response Parser — Raw Completion → Reply + Metadata
# =============================================================================
#
# The model is asked to end its answer with `META: {"emotion":..., "tone":...}`
# but does not always comply. This module never raises:
#
#   - EVERY line whose stripped form starts with "META:" (any case) is removed
#     from the reply, wherever it appears. A mid-reply line that happens to
#     look like a sentinel is stripped too.
#   - Only the FIRST such line is decoded. Invalid JSON or a non-object
#     value yields {}.
#   - The reply is the remaining lines, original order, trimmed at the ends.
# =============================================================================

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from app.exceptions import MetadataParseError
from app.services.prompt import META_PREFIX

logger = logging.getLogger(__name__)


@dataclass
class ParsedReply:
    """User-facing reply text plus best-effort metadata."""

    reply: str
    meta: dict[str, Any] = field(default_factory=dict)


def is_meta_line(line: str) -> bool:
    """True if the line is a sentinel metadata line."""
    return line.strip()[:len(META_PREFIX)].upper() == META_PREFIX


def decode_meta_line(line: str) -> dict[str, Any]:
    """
    Decode the JSON object carried by a sentinel line.

    Raises:
        MetadataParseError: If the payload is not a JSON object.
    """
    payload = line.strip()[len(META_PREFIX):].strip()
    try:
        value = json.loads(payload)
    except (ValueError, RecursionError) as exc:
        raise MetadataParseError(f"Invalid META JSON: {payload[:80]!r}") from exc
    if not isinstance(value, dict):
        raise MetadataParseError(
            f"META payload is {type(value).__name__}, expected an object"
        )
    return value


def parse_response(raw: str | None) -> ParsedReply:
    """Split a raw completion into reply text and metadata. Never raises."""
    lines = (raw or "").split("\n")
    meta_lines = [line for line in lines if is_meta_line(line)]
    reply = "\n".join(line for line in lines if not is_meta_line(line)).strip()

    meta: dict[str, Any] = {}
    if meta_lines:
        try:
            meta = decode_meta_line(meta_lines[0])
        except MetadataParseError as exc:
            logger.debug("Discarding metadata: %s", exc)

    return ParsedReply(reply=reply, meta=meta)
