"""
specmap/mappers/value_coercer.py

Best-effort conversion of raw spreadsheet cells into typed scalars.

None of these helpers raise: malformed input degrades to a fallback value
(``0`` for numbers, a placeholder for text, ``None`` for coordinates).
"""

from __future__ import annotations

import math
import numbers
import re
from typing import Any

from specmap.mappers.field_resolver import MISSING

_NON_NUMERIC_CHARS = re.compile(r"[^0-9.]")
_LEADING_DECIMAL = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_LEADING_SIGNED_DECIMAL = re.compile(r"\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+))")


def is_blank(raw: Any) -> bool:
    """
    True for absent cells: None, MISSING, NaN and empty/whitespace strings.
    """

    if raw is None or raw is MISSING:
        return True
    if isinstance(raw, float) and math.isnan(raw):
        return True
    if isinstance(raw, str) and not raw.strip():
        return True
    return False


def _is_real_number(raw: Any) -> bool:
    return isinstance(raw, numbers.Real) and not isinstance(raw, bool)


def to_number(raw: Any) -> float:
    """
    Coerce a cell into a finite float.

    Strings keep only digits and dots, then the leading decimal literal is
    parsed, so ``"1,200 t"`` becomes ``1200.0`` and ``"1.2.3"`` becomes
    ``1.2``. Anything unparsable yields ``0.0``.
    """

    if is_blank(raw):
        return 0.0
    if _is_real_number(raw):
        value = float(raw)
        return value if math.isfinite(value) else 0.0

    cleaned = _NON_NUMERIC_CHARS.sub("", str(raw))
    match = _LEADING_DECIMAL.match(cleaned)
    if match is None:
        return 0.0
    value = float(match.group(0))
    return value if math.isfinite(value) else 0.0


def to_int(raw: Any) -> int:
    return int(to_number(raw))


def to_text(raw: Any, fallback: str) -> str:
    """
    Stringify and trim a cell, or return ``fallback`` when it is empty.
    """

    if is_blank(raw):
        return fallback
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    text = str(raw).strip()
    return text if text else fallback


def to_coordinate(raw: Any, *, limit: float) -> float | None:
    """
    Parse a latitude/longitude cell.

    Text cells keep their leading signed decimal, so ``"37.5665°"`` and
    ``"126.978 E"`` still parse.

    Zero, blanks, non-numeric text and values outside ``[-limit, limit]``
    all count as a parse failure and return ``None``.
    """

    if is_blank(raw):
        return None
    if _is_real_number(raw):
        value = float(raw)
    else:
        match = _LEADING_SIGNED_DECIMAL.match(str(raw))
        if match is None:
            return None
        value = float(match.group(1))
    if not math.isfinite(value) or value == 0.0 or abs(value) > limit:
        return None
    return value
