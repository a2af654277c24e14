"""Analysis modules for data-quality profiling and dimensionality reduction."""

from .base_analyser import BaseAnalyser
from .pca_analyzer import PCAAnalyzer, PCAResult, align_signs
from .quality_profiler import (
    SECOND_MODE_SENTINEL,
    SECOND_MODE_SENTINEL_CATEGORICAL,
    ModeSummary,
    QualityProfileResult,
    QualityProfiler,
    QualityThresholds,
    mode_summary,
)
from .reduction_suite import (
    DEFAULT_SEED,
    EmbeddingResult,
    ReductionConfig,
    ReductionSuite,
    ReductionSuiteResult,
    Technique,
)


__all__ = [
    "DEFAULT_SEED",
    "SECOND_MODE_SENTINEL",
    "SECOND_MODE_SENTINEL_CATEGORICAL",
    "BaseAnalyser",
    "EmbeddingResult",
    "ModeSummary",
    "PCAAnalyzer",
    "PCAResult",
    "QualityProfileResult",
    "QualityProfiler",
    "QualityThresholds",
    "ReductionConfig",
    "ReductionSuite",
    "ReductionSuiteResult",
    "Technique",
    "align_signs",
    "mode_summary",
]
