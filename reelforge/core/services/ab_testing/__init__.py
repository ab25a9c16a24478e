from reelforge.core.services.ab_testing.schemas import (
    ABTestComparison,
    ABTestError,
    ABTestOptions,
    ABTestResults,
    ABTestVariantResult,
    ComparisonRow,
    ModelVariant,
    ScoringWeights,
    VariantMetrics,
)
from reelforge.core.services.ab_testing.scoring import (
    QualityScorer,
    build_comparison,
    build_comparison_table,
    default_quality_scorer,
    render_comparison_table,
    variant_metrics,
)
from reelforge.core.services.ab_testing.service import ABTestingService

__all__ = [
    'ABTestComparison',
    'ABTestError',
    'ABTestOptions',
    'ABTestResults',
    'ABTestVariantResult',
    'ABTestingService',
    'ComparisonRow',
    'ModelVariant',
    'QualityScorer',
    'ScoringWeights',
    'VariantMetrics',
    'build_comparison',
    'build_comparison_table',
    'default_quality_scorer',
    'render_comparison_table',
    'variant_metrics',
]
