"""
specmap/config.py

Environment-driven configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
MIN_GEOCODE_DELAY_SECONDS = 0.6


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class GeocodingSettings:
    """
    Address lookup behavior against the public search endpoint.
    """

    enabled: bool = True
    base_url: str = NOMINATIM_SEARCH_URL
    accept_language: str = "ko-KR"
    user_agent: str = "specmap/1.0"
    timeout_seconds: float = 10.0
    delay_seconds: float = 1.0
    max_retries: int = 0
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    min_address_length: int = 5


@dataclass(frozen=True)
class AggregationSettings:
    """
    Leaderboard and trend settings.
    """

    top_n: int = 5
    catch_all_label: str = "기타"


@dataclass(frozen=True)
class UploadSettings:
    """
    Limits applied to uploaded spreadsheets.
    """

    max_upload_bytes: int = 20 * 1024 * 1024


@lru_cache(maxsize=1)
def get_geocoding_settings() -> GeocodingSettings:
    """
    Return cached geocoding settings from environment variables.

    The inter-request delay never drops below MIN_GEOCODE_DELAY_SECONDS.
    """

    return GeocodingSettings(
        enabled=_get_bool_env("GEOCODE_ENABLED", True),
        base_url=_get_str_env("GEOCODE_BASE_URL", NOMINATIM_SEARCH_URL),
        accept_language=_get_str_env("GEOCODE_ACCEPT_LANGUAGE", "ko-KR"),
        user_agent=_get_str_env("GEOCODE_USER_AGENT", "specmap/1.0"),
        timeout_seconds=max(1.0, _get_float_env("GEOCODE_TIMEOUT_SECONDS", 10.0)),
        delay_seconds=max(MIN_GEOCODE_DELAY_SECONDS, _get_float_env("GEOCODE_DELAY_SECONDS", 1.0)),
        max_retries=max(0, _get_int_env("GEOCODE_MAX_RETRIES", 0)),
        backoff_initial_seconds=max(0.1, _get_float_env("GEOCODE_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("GEOCODE_BACKOFF_MULTIPLIER", 2.0)),
        min_address_length=max(0, _get_int_env("GEOCODE_MIN_ADDRESS_LENGTH", 5)),
    )


@lru_cache(maxsize=1)
def get_aggregation_settings() -> AggregationSettings:
    """
    Return cached aggregation settings from environment variables.
    """

    return AggregationSettings(
        top_n=max(1, _get_int_env("AGGREGATION_TOP_N", 5)),
        catch_all_label=_get_str_env("AGGREGATION_CATCH_ALL_LABEL", "기타"),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload settings from environment variables.
    """

    return UploadSettings(
        max_upload_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", 20 * 1024 * 1024)),
    )
