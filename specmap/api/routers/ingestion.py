"""
specmap/api/routers/ingestion.py

Spreadsheet upload and progress endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from specmap.api.dependencies import get_pipeline, get_spreadsheet_upload
from specmap.config import get_upload_settings
from specmap.decoders.spreadsheet import SpreadsheetDecodeError, is_supported_filename
from specmap.schemas.ingestion import IngestionSummaryResponse, ProgressResponse
from specmap.services.ingestion_pipeline import IngestionInProgressError, PipelineContext

router = APIRouter(tags=["ingestion"])

_CSV_CONTENT_TYPES = {"text/csv", "application/csv"}


def _decoder_filename(upload: UploadFile) -> str:
    """
    Give the decoder a filename with a usable extension.
    """

    filename = (upload.filename or "").strip() or "upload"
    if is_supported_filename(filename):
        return filename
    content_type = (upload.content_type or "").strip().lower()
    return f"{filename}.csv" if content_type in _CSV_CONTENT_TYPES else f"{filename}.xlsx"


@router.post("/uploads", response_model=IngestionSummaryResponse)
async def upload_spreadsheet(
    file: UploadFile = Depends(get_spreadsheet_upload),
    pipeline: PipelineContext = Depends(get_pipeline),
) -> IngestionSummaryResponse:
    """
    Ingest one spreadsheet, geocode missing locations, and publish the result.
    """

    max_bytes = get_upload_settings().max_upload_bytes
    try:
        content = await file.read()
    finally:
        await file.close()

    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload exceeds {max_bytes} bytes.",
        )

    try:
        summary = await pipeline.ingest_upload(content=content, filename=_decoder_filename(file))
    except IngestionInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SpreadsheetDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return IngestionSummaryResponse.from_domain(summary)


@router.get("/progress", response_model=ProgressResponse)
def get_progress(pipeline: PipelineContext = Depends(get_pipeline)) -> ProgressResponse:
    """
    Latest (status, percent) pair of the current or last ingestion run.
    """

    event = pipeline.progress
    return ProgressResponse(
        status=event.status,
        percent=event.percent,
        is_running=pipeline.is_running,
        last_error=pipeline.last_error,
    )
