# =============================================================================
# Context Composer — Stored Documents → Prompt Context Block
# =============================================================================
#
# Renders every stored document as a labelled excerpt. Each excerpt is cut
# to `max_chars` characters, so the block length is bounded by
#   num_documents × (max_chars + per-section overhead)
# no matter how large the uploads are.
#
# Section format:
#   — report.pdf —
#   <first max_chars characters>…[truncated]
# =============================================================================

from __future__ import annotations

from collections.abc import Iterable

from app.config import settings
from app.services.store import DocumentRecord

TRUNCATION_MARKER = "…[truncated]"
SECTION_SEPARATOR = "\n"


def _render_section(record: DocumentRecord, max_chars: int) -> str:
    text = record.text or ""
    excerpt = text[:max_chars]
    marker = TRUNCATION_MARKER if len(text) > max_chars else ""
    return f"— {record.filename} —\n{excerpt}{marker}\n"


def compose_context(
    records: Iterable[DocumentRecord],
    max_chars: int | None = None,
) -> str:
    """
    Build the context block for one chat request.

    Args:
        records: Store snapshot, in store order.
        max_chars: Per-document excerpt limit. Defaults to
            settings.context_max_chars.

    Returns:
        The concatenated sections, or "" when there are no records.
    """
    limit = settings.context_max_chars if max_chars is None else max_chars
    return SECTION_SEPARATOR.join(_render_section(r, limit) for r in records)
