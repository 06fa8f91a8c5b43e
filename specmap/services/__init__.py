"""
specmap/services package marker.
"""

from specmap.services.aggregation_service import AggregationService, get_aggregation_service
from specmap.services.enrichment_orchestrator import (
    EnrichmentOrchestrator,
    EnrichmentResult,
    ProgressCallback,
    ProgressEvent,
)
from specmap.services.ingestion_pipeline import (
    IngestionInProgressError,
    PipelineContext,
    build_pipeline_context,
)

__all__ = [
    "AggregationService",
    "EnrichmentOrchestrator",
    "EnrichmentResult",
    "IngestionInProgressError",
    "PipelineContext",
    "ProgressCallback",
    "ProgressEvent",
    "build_pipeline_context",
    "get_aggregation_service",
]
