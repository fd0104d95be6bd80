"""Core package for the mortgage deal aggregation pipeline."""

from .errors import DealPipelineError, PersistenceError, QueryError, SourceAcquisitionError
from .filters import DealFilters, apply_filters
from .metrics import calculate_metrics
from .models import CandidateDeal, Deal, DealType, DerivedMetrics, IngestionResult
from .normalizer import normalize_batch, normalize_candidate

__all__ = [
    "CandidateDeal",
    "Deal",
    "DealFilters",
    "DealPipelineError",
    "DealType",
    "DerivedMetrics",
    "IngestionResult",
    "PersistenceError",
    "QueryError",
    "SourceAcquisitionError",
    "apply_filters",
    "calculate_metrics",
    "normalize_batch",
    "normalize_candidate",
]
