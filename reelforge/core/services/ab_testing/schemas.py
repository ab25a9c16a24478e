"""A/B testing data contracts."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from reelforge.core.pipelines import NodeKind, PipelineConfig
from reelforge.temporal.schemas import PipelineResult


class ABTestError(RuntimeError):
    """Raised when an A/B test cannot produce a comparison."""


class ModelVariant(BaseModel):
    """One model substitution to test against the base pipeline."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description='Unique id, used in the workflow id')
    name: str = Field(..., min_length=1, description='Human readable name')
    node_kind: NodeKind = Field(description='Which pipeline nodes get the substituted model')
    model: str = Field(description='Registry id of the model to use (e.g. veo-3, kling-v2.1)')
    param_overrides: dict[str, Any] = Field(default_factory=dict)


class VariantMetrics(BaseModel):
    """Cost and timing of one variant. Times are in seconds."""

    total_cost: float = 0.0
    total_time: float = 0.0
    cost_per_node: float = 0.0
    time_per_node: float = 0.0
    value_score: float = Field(0.0, description='total_cost * total_time, lower is better')
    success_rate: float = Field(0.0, ge=0.0, le=1.0)


class ABTestVariantResult(BaseModel):
    variant: ModelVariant
    workflow_id: str
    result: PipelineResult | None = Field(None, description='None when the execution itself failed')
    metrics: VariantMetrics = Field(default_factory=VariantMetrics)
    outputs: dict[str, str] = Field(default_factory=dict)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.result is not None and self.result.success


class ScoringWeights(BaseModel):
    """Weights of the overall winner score. Should sum to 1."""

    cost: float = Field(0.4, ge=0.0)
    speed: float = Field(0.4, ge=0.0)
    quality: float = Field(0.2, ge=0.0)


class ABTestComparison(BaseModel):
    fastest: ModelVariant
    fastest_time: float
    cheapest: ModelVariant
    cheapest_cost: float
    best_value: ModelVariant
    best_value_score: float
    winner: ModelVariant
    winner_score: float


class ComparisonRow(BaseModel):
    variant: str
    success: bool
    cost: float
    time: float
    cost_per_node: float
    time_per_node: float
    value_score: float
    quality_score: float | None = None


class ABTestOptions(BaseModel):
    test_id: str | None = Field(None, description='Defaults to a generated ab-test-<hex> id')
    test_name: str = 'A/B test'
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    task_queue: str | None = Field(None, description='Defaults to AB_TEST_TASK_QUEUE')
    secret_key: str | None = None


class ABTestResults(BaseModel):
    test_id: str
    test_name: str
    start_time: datetime
    end_time: datetime
    total_duration: float = Field(description='Seconds')
    base_config: PipelineConfig
    variants: list[ABTestVariantResult]
    comparison: ABTestComparison
    comparison_table: list[ComparisonRow]
