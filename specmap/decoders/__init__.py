"""
specmap/decoders package marker.
"""

from specmap.decoders.spreadsheet import (
    SUPPORTED_EXTENSIONS,
    SpreadsheetDecodeError,
    decode_spreadsheet,
    is_supported_filename,
)

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "SpreadsheetDecodeError",
    "decode_spreadsheet",
    "is_supported_filename",
]
