"""Pure comparison logic for A/B test results.

All rankings consider successful variants only and prefer lower values.
On ties the variant that was listed first wins.
"""

from typing import Callable

from reelforge.core.services.ab_testing.schemas import (
    ABTestComparison,
    ABTestError,
    ABTestVariantResult,
    ComparisonRow,
    ScoringWeights,
    VariantMetrics,
)
from reelforge.temporal.schemas import PipelineResult

QualityScorer = Callable[[ABTestVariantResult], float]

DEFAULT_QUALITY = 0.5


def default_quality_scorer(result: ABTestVariantResult) -> float:
    """Constant quality until a real output scorer is plugged in."""
    return DEFAULT_QUALITY


def variant_metrics(result: PipelineResult) -> VariantMetrics:
    """Derive variant metrics from a finished pipeline.

    Failed pipelines get zero metrics so they never win a ranking.
    """
    if not result.success:
        return VariantMetrics()

    nodes = len(result.stages) or 1
    return VariantMetrics(
        total_cost=result.total_cost,
        total_time=result.total_time,
        cost_per_node=result.total_cost / nodes,
        time_per_node=result.total_time / nodes,
        value_score=result.total_cost * result.total_time,
        success_rate=1.0,
    )


def _normalize(value: float, maximum: float) -> float:
    return value / maximum if maximum > 0 else 0.0


def winner_scores(
    results: list[ABTestVariantResult],
    weights: ScoringWeights,
    quality_scorer: QualityScorer = default_quality_scorer,
) -> list[float]:
    """Weighted score per result (lower is better), normalized within `results`."""
    max_cost = max((r.metrics.total_cost for r in results), default=0.0)
    max_time = max((r.metrics.total_time for r in results), default=0.0)

    scores = []
    for r in results:
        quality = min(max(quality_scorer(r), 0.0), 1.0)
        scores.append(
            _normalize(r.metrics.total_cost, max_cost) * weights.cost
            + _normalize(r.metrics.total_time, max_time) * weights.speed
            + (1 - quality) * weights.quality
        )
    return scores


def build_comparison(
    results: list[ABTestVariantResult],
    weights: ScoringWeights | None = None,
    quality_scorer: QualityScorer = default_quality_scorer,
) -> ABTestComparison:
    """Rank successful variants.

    Raises:
        ABTestError: If no variant succeeded
    """
    successful = [r for r in results if r.success]
    if not successful:
        raise ABTestError('All variants failed, cannot generate comparison')

    # min() keeps the first of equal elements
    fastest = min(successful, key=lambda r: r.metrics.total_time)
    cheapest = min(successful, key=lambda r: r.metrics.total_cost)
    best_value = min(successful, key=lambda r: r.metrics.value_score)

    scores = winner_scores(successful, weights or ScoringWeights(), quality_scorer)
    winner_index = min(range(len(successful)), key=lambda i: scores[i])

    return ABTestComparison(
        fastest=fastest.variant,
        fastest_time=fastest.metrics.total_time,
        cheapest=cheapest.variant,
        cheapest_cost=cheapest.metrics.total_cost,
        best_value=best_value.variant,
        best_value_score=best_value.metrics.value_score,
        winner=successful[winner_index].variant,
        winner_score=scores[winner_index],
    )


def build_comparison_table(
    results: list[ABTestVariantResult],
    quality_scorer: QualityScorer | None = None,
) -> list[ComparisonRow]:
    """One row per variant, failed ones included, in input order."""
    return [
        ComparisonRow(
            variant=r.variant.name,
            success=r.success,
            cost=r.metrics.total_cost,
            time=r.metrics.total_time,
            cost_per_node=r.metrics.cost_per_node,
            time_per_node=r.metrics.time_per_node,
            value_score=r.metrics.value_score,
            quality_score=quality_scorer(r) if quality_scorer and r.success else None,
        )
        for r in results
    ]


def render_comparison_table(rows: list[ComparisonRow]) -> str:
    """Plain text table for terminals and logs."""
    width = 80
    lines = [
        '-' * width,
        f'{"Variant":<25}{"Cost":>12}{"Time":>12}{"Value Score":>15}{"Status":>16}',
        '-' * width,
    ]
    for row in rows:
        lines.append(
            f'{row.variant:<25}'
            f'{f"${row.cost:.4f}":>12}'
            f'{f"{row.time:.1f}s":>12}'
            f'{row.value_score:>15.4f}'
            f'{"ok" if row.success else "failed":>16}'
        )
    lines.append('-' * width)
    return '\n'.join(lines)
