"""
specmap/decoders/spreadsheet.py

Adapter over pandas that turns uploaded spreadsheet bytes into raw records.
"""

from __future__ import annotations

import io
import logging
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xls")
CSV_EXTENSIONS = (".csv",)
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS + CSV_EXTENSIONS


class SpreadsheetDecodeError(ValueError):
    """
    Raised when uploaded bytes cannot be decoded into rows.
    """


def is_supported_filename(filename: str | None) -> bool:
    return (filename or "").strip().lower().endswith(SUPPORTED_EXTENSIONS)


def _read_frame(content: bytes, filename: str) -> pd.DataFrame:
    lowered = filename.strip().lower()
    buffer = io.BytesIO(content)
    if lowered.endswith(CSV_EXTENSIONS):
        return pd.read_csv(buffer, encoding="utf-8-sig")
    if lowered.endswith(EXCEL_EXTENSIONS):
        # First sheet only.
        return pd.read_excel(buffer, sheet_name=0)
    raise SpreadsheetDecodeError(
        f"Unsupported file type '{filename}'. Allowed: {', '.join(SUPPORTED_EXTENSIONS)}."
    )


def decode_spreadsheet(content: bytes, filename: str) -> list[dict[str, Any]]:
    """
    Decode the first sheet of a workbook (or a CSV file) into row mappings.

    Column order is preserved in each mapping and empty cells become ``None``.
    """

    if not content:
        raise SpreadsheetDecodeError("Uploaded file is empty.")
    try:
        frame = _read_frame(content, filename)
    except SpreadsheetDecodeError:
        raise
    except Exception as exc:  # noqa: BLE001 - any decoder failure aborts the upload
        logger.warning("Spreadsheet decode failed filename=%s error=%s", filename, exc)
        raise SpreadsheetDecodeError(f"Could not read '{filename}': {exc}") from exc

    frame = frame.astype(object).where(pd.notna(frame), None)
    rows = [
        {str(column): value for column, value in zip(frame.columns, values)}
        for values in frame.itertuples(index=False, name=None)
    ]
    logger.info("Spreadsheet decoded filename=%s rows=%s columns=%s", filename, len(rows), len(frame.columns))
    return rows
