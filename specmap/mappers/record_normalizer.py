"""
specmap/mappers/record_normalizer.py

Turns raw spreadsheet rows into canonical records.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from typing import Any

from specmap.domain.canonical_record import (
    PLACEHOLDER,
    CanonicalRecord,
    NormalizationResult,
    RawRecord,
)
from specmap.mappers.field_resolver import FieldResolver
from specmap.mappers.value_coercer import to_coordinate, to_int, to_number, to_text

logger = logging.getLogger(__name__)

MAX_LATITUDE = 90.0
MAX_LONGITUDE = 180.0


def _new_record_id() -> str:
    return uuid.uuid4().hex


class RecordNormalizer:
    """
    Applies the field resolver and value coercers to every raw row.

    Rows whose project name coerces to an empty string are dropped; that is
    the only filtering done here.
    """

    def __init__(
        self,
        *,
        resolver: FieldResolver | None = None,
        id_factory: Callable[[], str] = _new_record_id,
    ) -> None:
        self._resolver = resolver or FieldResolver()
        self._id_factory = id_factory

    def normalize(self, raw_records: Iterable[RawRecord]) -> NormalizationResult:
        records: list[CanonicalRecord] = []
        rows_read = 0
        rows_dropped = 0

        for raw in raw_records:
            rows_read += 1
            record = self.normalize_row(raw)
            if record is None:
                rows_dropped += 1
                continue
            records.append(record)

        if rows_dropped:
            logger.info(
                "Dropped rows without project name rows_read=%s rows_dropped=%s",
                rows_read,
                rows_dropped,
            )
        return NormalizationResult(records=records, rows_read=rows_read, rows_dropped=rows_dropped)

    def normalize_row(self, raw: RawRecord) -> CanonicalRecord | None:
        """
        Normalize one row, or return ``None`` when it has no project name.
        """

        values: dict[str, Any] = self._resolver.resolve_all(raw)

        project_name = to_text(values.get("project_name"), "")
        if not project_name:
            return None

        latitude = to_coordinate(values.get("latitude"), limit=MAX_LATITUDE)
        longitude = to_coordinate(values.get("longitude"), limit=MAX_LONGITUDE)
        if latitude is None or longitude is None:
            latitude = longitude = None

        return CanonicalRecord(
            id=self._id_factory(),
            project_name=project_name,
            year=to_int(values.get("year")),
            month=to_int(values.get("month")),
            progress=to_text(values.get("progress"), PLACEHOLDER),
            address=to_text(values.get("address"), PLACEHOLDER),
            latitude=latitude,
            longitude=longitude,
            designer=to_text(values.get("designer"), PLACEHOLDER),
            constructor=to_text(values.get("constructor"), PLACEHOLDER),
            product_name=to_text(values.get("product_name"), PLACEHOLDER),
            quantity=to_number(values.get("quantity")),
            spec_amount=to_number(values.get("spec_amount")),
        )


def normalize(raw_records: Iterable[RawRecord]) -> list[CanonicalRecord]:
    """
    Normalize raw rows with the default alias table.
    """

    return RecordNormalizer().normalize(raw_records).records
