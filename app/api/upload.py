# =============================================================================
# Upload API — Document Ingestion
# =============================================================================
#
# ENDPOINTS:
#   POST /api/file  — Upload a PDF or text file; its text joins the context
#
# Ingestion is synchronous: when the response arrives, the document is
# already available to the next chat request. Re-uploading a filename
# replaces the earlier copy.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from app.api.deps import get_document_store
from app.exceptions import IngestionError
from app.models.responses import UploadResponse
from app.services.assistant import ingest_upload
from app.services.store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post(
    "/file",
    response_model=UploadResponse,
    summary="Upload a document for chat context",
    description=(
        "Upload a PDF or plain-text file. Its extracted text is kept in "
        "memory and included (truncated) as context in later chat requests."
    ),
    responses={422: {"model": UploadResponse}},
)
async def upload_file_endpoint(
    file: UploadFile = File(..., description="PDF or text file"),
    store: DocumentStore = Depends(get_document_store),
) -> UploadResponse | JSONResponse:
    """Extract the file's text and store it under its filename."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file")

    data = await file.read()

    try:
        await ingest_upload(store, file.filename, data, file.content_type)
    except IngestionError as e:
        logger.warning("Upload rejected: %s", e)
        return JSONResponse(
            status_code=422,
            content=UploadResponse(
                ok=False, filename=file.filename, error=str(e),
            ).model_dump(),
        )

    return UploadResponse(ok=True, filename=file.filename)
