"""
specmap/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, Request, UploadFile, status

from specmap.decoders.spreadsheet import SUPPORTED_EXTENSIONS, is_supported_filename
from specmap.services.ingestion_pipeline import PipelineContext

SPREADSHEET_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
    "text/csv",
    "application/csv",
}


def get_spreadsheet_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a spreadsheet by extension or MIME type.
    """

    content_type = (file.content_type or "").strip().lower()
    if not is_supported_filename(file.filename) and content_type not in SPREADSHEET_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only spreadsheet files are allowed ({', '.join(SUPPORTED_EXTENSIONS)}).",
        )
    return file


def get_pipeline(request: Request) -> PipelineContext:
    """
    Return the pipeline context owned by the running application.
    """

    return request.app.state.pipeline
