# =============================================================================
# FastAPI Application Entry Point
# =============================================================================
#
# Wires the routers, CORS, the static browser UI, and the single
# DocumentStore that backs every request for the life of the process.
#
# Run:
#   uvicorn app.main:app --port 3000
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from app.api import chat, speech, upload
from app.config import get_settings
from app.models.responses import HealthResponse
from app.services.llm import close_llm_provider
from app.services.speech import close_speech_synthesizer
from app.services.store import DocumentStore

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Install one root handler for the whole application."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the shared DocumentStore; report which upstream keys are set.

    Cached upstream clients are closed on shutdown.
    """
    settings = get_settings()
    app.state.document_store = DocumentStore()

    chat_key = (
        settings.llm_api_key
        or {
            "gemini": settings.gemini_api_key,
            "anthropic": settings.anthropic_api_key,
            "openai_compatible": settings.openai_api_key,
        }.get(settings.llm_provider)
    )
    logger.info(
        "Chat provider: %s (%s), key %s",
        settings.llm_provider,
        settings.llm_model,
        "loaded" if chat_key else "MISSING",
    )
    logger.info(
        "Speech voice: %s, key %s",
        settings.tts_voice_name,
        "loaded" if settings.google_tts_api_key else "MISSING",
    )

    yield

    logger.info(
        "Shutting down with %d document(s) in memory",
        len(app.state.document_store),
    )
    await close_llm_provider()
    await close_speech_synthesizer()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Holographic chat assistant with document context and speech",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat.router)
    app.include_router(upload.router)
    app.include_router(speech.router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health(request: Request) -> HealthResponse:
        return HealthResponse(
            version=settings.app_version,
            service=settings.app_name,
            documents=len(request.app.state.document_store),
        )

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        index_file = static_dir / "index.html"
        if not index_file.is_file():
            raise HTTPException(status_code=404, detail="No UI installed")
        return FileResponse(index_file)

    return app


app = create_app()


def main() -> None:
    """Entry point for running the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
