"""
specmap/api/routers package marker.
"""

from specmap.api.routers.dashboard import router as dashboard_router
from specmap.api.routers.ingestion import router as ingestion_router

__all__ = [
    "dashboard_router",
    "ingestion_router",
]
