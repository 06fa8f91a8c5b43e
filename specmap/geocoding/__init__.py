"""
specmap/geocoding package marker.
"""

from specmap.geocoding.cache import GeocodeCache
from specmap.geocoding.client import GeocodeRequestError, GeocodingClient
from specmap.geocoding.rate_limiter import SequentialRateLimiter

__all__ = [
    "GeocodeCache",
    "GeocodeRequestError",
    "GeocodingClient",
    "SequentialRateLimiter",
]
