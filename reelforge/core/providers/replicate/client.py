"""Replicate client - native async wrapper around the official replicate package."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

import replicate

from reelforge.core.configs import app_config
from reelforge.core.providers.replicate.schemas import (
    ReplicatePrediction,
    ReplicatePredictionStatus,
)

if TYPE_CHECKING:
    from replicate.prediction import Prediction

# Called after every poll with the latest prediction state
PollCallback = Callable[[ReplicatePrediction], Awaitable[None] | None]


class ReplicatePredictionError(RuntimeError):
    """Raised when a prediction finishes in a failed or canceled state."""

    def __init__(self, prediction: ReplicatePrediction):
        self.prediction = prediction
        super().__init__(
            f'Replicate prediction {prediction.id} {prediction.status.value}: {prediction.error or "no error message"}'
        )


class ReplicateClient:
    """Async client for Replicate API.

    Example:
        client = ReplicateClient()

        # Run and wait, heartbeating on every poll
        prediction = await client.run(
            'google/veo-3-fast',
            {'prompt': 'A sunset'},
            on_poll=lambda p: activity.heartbeat({'status': p.status.value}),
        )
    """

    def __init__(self, api_token: str | None = None) -> None:
        token = api_token or app_config.replicate_token
        if not token:
            raise ValueError('REPLICATE_API_KEY is not set.')
        self._client = replicate.Client(api_token=token)

    async def run(
        self,
        model: str,
        input: dict[str, Any],
        wait: bool = True,
        poll_interval: float = 2.0,
        on_poll: PollCallback | None = None,
    ) -> ReplicatePrediction:
        """Run a model and optionally wait for completion.

        Args:
            model: Model identifier (e.g., 'owner/model' or 'owner/model:version')
            input: Model-specific input parameters
            wait: If True, poll until the prediction reaches a terminal state
            poll_interval: Seconds between polls
            on_poll: Optional callback invoked with the prediction after each poll

        Returns:
            ReplicatePrediction with output and metadata

        Raises:
            ReplicatePredictionError: If the prediction failed or was canceled
            asyncio.CancelledError: If the caller was cancelled; the remote prediction is cancelled too
        """
        prediction = await self.create_prediction(model, input)

        if not wait:
            return prediction

        try:
            while not prediction.is_terminal:
                await asyncio.sleep(poll_interval)
                prediction = await self.get_prediction(prediction.id)
                if on_poll is not None:
                    result = on_poll(prediction)
                    if asyncio.iscoroutine(result):
                        await result
        except asyncio.CancelledError:
            # Nobody will collect the output, stop paying for it
            await self.cancel_prediction(prediction.id)
            raise

        if not prediction.is_successful:
            raise ReplicatePredictionError(prediction)

        return prediction

    async def create_prediction(self, model: str, input: dict[str, Any]) -> ReplicatePrediction:
        """Create a new prediction without waiting for completion."""
        model_owner, model_name, version = self._parse_model_string(model)

        if version:
            raw_prediction = await self._client.predictions.async_create(version=version, input=input)
        else:
            raw_prediction = await self._client.models.predictions.async_create(
                model=(model_owner, model_name), input=input
            )

        return self._convert_prediction(raw_prediction)

    async def get_prediction(self, prediction_id: str) -> ReplicatePrediction:
        """Get the current status of a prediction."""
        raw_prediction = await self._client.predictions.async_get(prediction_id)
        return self._convert_prediction(raw_prediction)

    async def cancel_prediction(self, prediction_id: str) -> ReplicatePrediction:
        """Cancel a running prediction."""
        raw_prediction = await self._client.predictions.async_cancel(prediction_id)
        return self._convert_prediction(raw_prediction)

    def _parse_model_string(self, model: str) -> tuple[str, str, str | None]:
        """Parse a model string into owner, name, and optional version."""
        version = None
        if ':' in model:
            model, version = model.rsplit(':', 1)

        parts = model.split('/')
        if len(parts) != 2:
            raise ValueError(f'Invalid model format: {model}')

        return parts[0], parts[1], version

    def _convert_prediction(self, prediction: 'Prediction') -> ReplicatePrediction:
        """Convert replicate.Prediction to our ReplicatePrediction."""
        return ReplicatePrediction(
            id=prediction.id,
            model=f'{prediction.model}' if prediction.model else 'unknown',
            version=prediction.version,
            status=ReplicatePredictionStatus(prediction.status),
            input=prediction.input or {},
            output=prediction.output,
            created_at=self._parse_datetime(prediction.created_at),
            started_at=self._parse_datetime(prediction.started_at),
            completed_at=self._parse_datetime(prediction.completed_at),
            error=str(prediction.error) if prediction.error else None,
            metrics=prediction.metrics,
        )

    def _parse_datetime(self, value: Any) -> datetime | None:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            return datetime.fromisoformat(value.replace('Z', '+00:00'))
        return None
