"""
specmap/geocoding/client.py

Blocking HTTP client for the public address-search endpoint.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any

import requests

from specmap.config import MIN_GEOCODE_DELAY_SECONDS, GeocodingSettings
from specmap.domain.canonical_record import Coordinates

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class GeocodeRequestError(RuntimeError):
    """
    Raised when a lookup cannot produce a usable answer.
    """


class GeocodingClient:
    """
    Issues one search request per address and parses the first hit.

    The client itself does no pacing; callers are expected to route every
    call through ``SequentialRateLimiter``.
    """

    def __init__(
        self,
        *,
        settings: GeocodingSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._headers = {
            "Accept-Language": settings.accept_language,
            "User-Agent": settings.user_agent,
        }

    def search(self, address: str) -> Coordinates | None:
        """
        Return coordinates of the first search hit, or ``None`` for no hits.

        Raises GeocodeRequestError on transport errors, non-2xx statuses,
        non-JSON bodies and non-numeric ``lat``/``lon`` values.
        """

        payload = self._request_json(
            params={"format": "json", "q": address, "limit": 1},
        )
        if not isinstance(payload, list):
            raise GeocodeRequestError("Search response was not a JSON array.")
        if not payload:
            return None
        return self.parse_hit(payload[0])

    @staticmethod
    def parse_hit(hit: Any) -> Coordinates:
        """
        Convert one search hit's string ``lat``/``lon`` into floats.
        """

        if not isinstance(hit, dict):
            raise GeocodeRequestError("Search hit was not a JSON object.")
        try:
            lat = float(hit["lat"])
            lon = float(hit["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodeRequestError(f"Search hit has unusable coordinates: {exc}") from exc
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise GeocodeRequestError("Search hit has non-finite coordinates.")
        return Coordinates(lat=lat, lon=lon)

    def close(self) -> None:
        self._session.close()

    def _request_json(self, *, params: dict[str, Any]) -> Any:
        response = self._request(params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise GeocodeRequestError("Search response was not valid JSON.") from exc

    def _request(self, *, params: dict[str, Any]) -> requests.Response:
        """
        Execute the search request with optional retries and exponential backoff.
        """

        url = self._settings.base_url
        max_retries = self._settings.max_retries
        last_error: Exception | None = None
        for attempt in range(max_retries + 1):
            try:
                response = self._session.get(
                    url,
                    params=params,
                    headers=self._headers,
                    timeout=self._settings.timeout_seconds,
                )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    raise GeocodeRequestError(f"Search request failed with status {status_code}.") from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
            except requests.RequestException as exc:
                raise GeocodeRequestError(f"Search request failed: {exc}") from exc

            if attempt >= max_retries:
                break

            # Retries never undercut the inter-request pacing.
            backoff_seconds = max(
                self._settings.backoff_initial_seconds * self._settings.backoff_multiplier**attempt,
                self._settings.delay_seconds,
                MIN_GEOCODE_DELAY_SECONDS,
            )
            logger.warning(
                "Geocode request retry attempt=%s/%s wait_seconds=%.2f",
                attempt + 1,
                max_retries,
                backoff_seconds,
            )
            time.sleep(backoff_seconds)

        raise GeocodeRequestError(f"Search request failed: {last_error}") from last_error
