# =============================================================================
# Assistant Pipeline — Upload and Chat Flows
# =============================================================================
#
#   upload: bytes → extract_text → DocumentStore.upsert
#   chat:   DocumentStore.list → compose_context → build_prompt
#           → LLMProvider.complete → parse_response
#
# Extraction runs in a worker thread so a slow PDF conversion does not
# block other requests on the event loop.
# =============================================================================

from __future__ import annotations

import asyncio
import logging

from app.services.context import compose_context
from app.services.llm import LLMProvider
from app.services.parser import extract_text
from app.services.prompt import build_prompt
from app.services.response_parser import ParsedReply, parse_response
from app.services.store import DocumentRecord, DocumentStore

logger = logging.getLogger(__name__)


async def ingest_upload(
    store: DocumentStore,
    filename: str,
    data: bytes,
    content_type: str | None = None,
) -> DocumentRecord:
    """
    Extract an upload's text and store it under its filename.

    Raises:
        IngestionError: The content could not be read. The store is
            left unchanged.
    """
    text = await asyncio.to_thread(extract_text, filename, data, content_type)
    record = store.upsert(filename, text)
    logger.info(
        "Ingested '%s' (%d bytes → %d chars, %d documents stored)",
        filename, len(data), len(text), len(store),
    )
    return record


async def answer(
    store: DocumentStore,
    provider: LLMProvider,
    utterance: str,
) -> ParsedReply:
    """
    Run one chat turn against the current store contents.

    Raises:
        UpstreamServiceError: The chat completion service failed.
    """
    records = store.list()
    context = compose_context(records)
    prompt = build_prompt(utterance, context)

    logger.info(
        "Chat request: user='%s', context_documents=%d, prompt_chars=%d",
        utterance[:80], len(records), len(prompt),
    )

    response = await provider.complete(prompt)
    logger.info(
        "Chat completion: model=%s, input_tokens=%d, output_tokens=%d",
        response.model, response.input_tokens, response.output_tokens,
    )
    return parse_response(response.content)
