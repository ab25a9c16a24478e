"""Replicate schemas - generic types for working with Replicate API."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ReplicatePredictionStatus(str, Enum):
    """Status of a Replicate prediction."""

    STARTING = 'starting'
    PROCESSING = 'processing'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    CANCELED = 'canceled'


class ReplicatePrediction(BaseModel):
    """Replicate prediction result for any registered model."""

    id: str = Field(description='Prediction ID')
    model: str = Field(description='Model identifier')
    version: str | None = Field(None, description='Model version hash')
    status: ReplicatePredictionStatus = Field(description='Current status')

    input: dict[str, Any] = Field(default_factory=dict)
    output: Any = Field(None, description='Model output (type varies by model)')

    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    error: str | None = None
    metrics: dict[str, Any] | None = None

    @property
    def is_terminal(self) -> bool:
        """Check if the prediction has reached a terminal state."""
        return self.status in (
            ReplicatePredictionStatus.SUCCEEDED,
            ReplicatePredictionStatus.FAILED,
            ReplicatePredictionStatus.CANCELED,
        )

    @property
    def is_successful(self) -> bool:
        return self.status == ReplicatePredictionStatus.SUCCEEDED

    @property
    def predict_time(self) -> float | None:
        """Get prediction time in seconds if available."""
        if self.metrics and 'predict_time' in self.metrics:
            return float(self.metrics['predict_time'])
        return None

    def get_all_output_urls(self) -> list[str]:
        """Get all output URLs from the prediction.

        Handles the output shapes Replicate models return: a single URL,
        a list of URLs (or file objects), or a dict with a `url` key.
        """
        if self.output is None:
            return []

        if isinstance(self.output, str):
            return [self.output]

        if isinstance(self.output, dict):
            return [str(self.output['url'])] if 'url' in self.output else []

        if hasattr(self.output, 'url'):
            return [str(self.output.url)]

        urls: list[str] = []
        if isinstance(self.output, list):
            for item in self.output:
                if isinstance(item, str):
                    urls.append(item)
                elif hasattr(item, 'url'):
                    urls.append(str(item.url))
        return urls

    def get_output_url(self) -> str | None:
        """Get the primary output URL."""
        urls = self.get_all_output_urls()
        return urls[0] if urls else None
