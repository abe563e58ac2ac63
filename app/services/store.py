# =============================================================================
# Document Store — In-Memory Uploaded Text
# =============================================================================
#
# Holds one text record per uploaded filename for the lifetime of the
# process. Nothing is written to disk; a restart empties the store.
#
# ORDERING: iteration order is most-recent-write order. Re-uploading a
# filename removes the old record and appends the new one at the end.
#
# CONCURRENCY: writers are serialised by a lock and each write publishes a
# fresh tuple. Readers grab the current tuple reference without locking,
# so a reader sees the store either entirely before or entirely after any
# upsert. Works from the event loop and from worker threads alike.
#
# The store has no size cap and no delete operation.
# =============================================================================

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentRecord:
    """One ingested upload, unique by filename within a store."""

    filename: str
    text: str
    ingested_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class DocumentStore:
    """
    Ordered, filename-keyed collection of DocumentRecord.

    One instance is created at application startup and shared by every
    request. Tests create their own.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: tuple[DocumentRecord, ...] = ()

    def upsert(self, filename: str, text: str) -> DocumentRecord:
        """Replace any record for `filename` and move it to the end."""
        record = DocumentRecord(filename=filename, text=text)
        with self._lock:
            kept = tuple(r for r in self._records if r.filename != filename)
            replaced = len(kept) != len(self._records)
            self._records = (*kept, record)
            count = len(self._records)

        logger.debug(
            "Stored '%s' (%d chars, replaced=%s, documents=%d)",
            filename, len(text), replaced, count,
        )
        return record

    def list(self) -> tuple[DocumentRecord, ...]:
        """Snapshot of the current records in store order."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)
