"""
specmap/mappers package marker.
"""

from specmap.mappers.field_resolver import (
    CANONICAL_FIELDS,
    FIELD_ALIASES,
    MISSING,
    FieldResolver,
    normalize_header,
    resolve,
)
from specmap.mappers.record_normalizer import RecordNormalizer, normalize
from specmap.mappers.value_coercer import to_coordinate, to_number, to_text

__all__ = [
    "CANONICAL_FIELDS",
    "FIELD_ALIASES",
    "MISSING",
    "FieldResolver",
    "RecordNormalizer",
    "normalize",
    "normalize_header",
    "resolve",
    "to_coordinate",
    "to_number",
    "to_text",
]
