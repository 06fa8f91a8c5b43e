"""
specmap/mappers/field_resolver.py

Alias-driven lookup of canonical fields in loosely-labelled records.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

CANONICAL_FIELDS: tuple[str, ...] = (
    "project_name",
    "year",
    "month",
    "progress",
    "address",
    "latitude",
    "longitude",
    "designer",
    "constructor",
    "product_name",
    "quantity",
    "spec_amount",
)

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "project_name": ("project_name", "프로젝트명", "현장명"),
    "year": ("year", "연도"),
    "month": ("month", "월"),
    "progress": ("progress", "진행내용", "상태"),
    "address": ("address", "주소", "상세주소"),
    "latitude": ("latitude", "위도"),
    "longitude": ("longitude", "경도"),
    "designer": ("designer", "설계사"),
    "constructor": ("constructor", "건설사"),
    "product_name": ("product_name", "제품명"),
    "quantity": ("quantity", "물량"),
    "spec_amount": ("spec_amount", "스펙량", "합계"),
}

# Everything outside ASCII alphanumerics and Hangul syllables is dropped.
_NON_KEY_CHARS = re.compile(r"[^a-z0-9가-힣]")


class _Missing:
    """
    Sentinel type for "no header matched".
    """

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def normalize_header(header: Any) -> str:
    """
    Normalize a column name for flexible matching.
    """

    return _NON_KEY_CHARS.sub("", str(header).lower())


def resolve(record: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    """
    Return the value of the first record key matching any alias.

    Keys are scanned in the record's insertion order, so when two headers
    normalize to the same alias the first-declared column wins. Returns
    ``MISSING`` when nothing matches.
    """

    normalized_aliases = {normalize_header(alias) for alias in aliases}
    normalized_aliases.discard("")
    for key in record:
        if normalize_header(key) in normalized_aliases:
            return record[key]
    return MISSING


class FieldResolver:
    """
    Resolves canonical fields through one static alias table.
    """

    def __init__(self, *, aliases: Mapping[str, Sequence[str]] | None = None) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(values)
            for canonical, values in (aliases or FIELD_ALIASES).items()
        }

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self._aliases)

    def aliases_for(self, canonical_field: str) -> tuple[str, ...]:
        return self._aliases.get(canonical_field, ())

    def resolve_field(self, record: Mapping[str, Any], canonical_field: str) -> Any:
        """
        Resolve one canonical field from a raw record.

        The canonical name itself always counts as an alias.
        """

        candidates = (canonical_field, *self.aliases_for(canonical_field))
        return resolve(record, candidates)

    def resolve_all(self, record: Mapping[str, Any]) -> dict[str, Any]:
        return {field: self.resolve_field(record, field) for field in self._aliases}
