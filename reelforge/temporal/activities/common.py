"""Helpers shared by the generation activities.

- Resolving registry models (unknown models are non-retryable failures)
- Running a prediction while heartbeating on every poll
- Downloading provider outputs to a fresh local file per attempt, heartbeating throughout
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
from temporalio import activity
from temporalio.exceptions import ApplicationError

from reelforge.core.ai_models.base import ModelCategory, ModelDefinition, ModelInput, Provider
from reelforge.core.ai_models.registry import ModelNotFoundError, ensure_models_registered, model_registry
from reelforge.core.configs import app_config
from reelforge.core.providers.replicate import ReplicateClient, ReplicatePrediction

_KNOWN_EXTENSIONS = ('mp4', 'webm', 'mov', 'png', 'jpg', 'jpeg', 'webp', 'gif')


def generate_key(folder: str, extension: str) -> str:
    """Generate a unique relative path for an output file."""
    date_prefix = datetime.now(timezone.utc).strftime('%Y/%m/%d')
    unique_id = uuid.uuid4().hex[:12]
    return f'{folder}/{date_prefix}/{unique_id}.{extension}'


def get_extension_from_content_type(content_type: str) -> str | None:
    mapping = {
        'image/png': 'png',
        'image/jpeg': 'jpg',
        'image/webp': 'webp',
        'image/gif': 'gif',
        'video/mp4': 'mp4',
        'video/webm': 'webm',
        'video/quicktime': 'mov',
    }
    base_type = content_type.split(';')[0].strip().lower()
    return mapping.get(base_type)


def get_extension_from_url(url: str) -> str | None:
    path = urlparse(url).path
    if '.' in path:
        ext = path.rsplit('.', 1)[-1].lower()
        if ext in _KNOWN_EXTENSIONS:
            return ext
    return None


# Liveness interval while an output is downloading, well under the workflows' heartbeat timeout
DOWNLOAD_HEARTBEAT_SECONDS = 15.0


@asynccontextmanager
async def keep_alive(details: dict[str, Any]) -> AsyncIterator[None]:
    """Heartbeat `details` on a fixed interval until the block exits."""

    async def beat() -> None:
        while True:
            await asyncio.sleep(DOWNLOAD_HEARTBEAT_SECONDS)
            activity.heartbeat(details)

    task = asyncio.create_task(beat())
    try:
        yield
    finally:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task


async def download_output(url: str, folder: str, default_extension: str, stage: str = 'download') -> str:
    """Download a provider output into OUTPUT_DIR and return the local path.

    Every call writes a new file, so a retried attempt never touches the
    output of a previous one. The body is streamed to disk and the activity
    keeps heartbeating for as long as the transfer runs.
    """
    details = {'stage': stage, 'progress': 95, 'status': 'downloading'}
    activity.heartbeat(details)

    async with keep_alive(details), httpx.AsyncClient(timeout=300.0) as client:
        async with client.stream('GET', url, follow_redirects=True) as response:
            response.raise_for_status()

            extension = (
                get_extension_from_content_type(response.headers.get('content-type', ''))
                or get_extension_from_url(url)
                or default_extension
            )
            path = Path(app_config.OUTPUT_DIR) / generate_key(folder, extension)
            path.parent.mkdir(parents=True, exist_ok=True)

            with path.open('wb') as file:
                async for chunk in response.aiter_bytes():
                    file.write(chunk)
                    activity.heartbeat(details)

    return str(path)


# Model input fields that may reference a local file
FILE_INPUT_KEYS = ('image', 'start_image', 'video')


def as_model_file(reference: str) -> str | Path:
    """Local files are handed to Replicate as paths (uploaded by the client), URLs as-is."""
    if urlparse(reference).scheme in ('http', 'https', 'data'):
        return reference
    path = Path(reference)
    return path if path.is_file() else reference


def resolve_model(model_id: str, category: ModelCategory) -> ModelDefinition:
    """Look up a registry model. Configuration errors are not worth retrying."""
    ensure_models_registered()
    try:
        model_def = model_registry.get_or_raise(model_id, category)
    except ModelNotFoundError as e:
        raise ApplicationError(str(e), type='ModelNotFoundError', non_retryable=True) from e

    if not model_def.supports_provider(Provider.REPLICATE):
        raise ApplicationError(
            f'Model {model_def.id} has no supported provider configured',
            type='UnsupportedProviderError',
            non_retryable=True,
        )
    return model_def


def build_model_input(model_def: ModelDefinition, input_data: dict[str, Any]) -> ModelInput:
    """Validate input against the model schema, dropping fields it does not accept."""
    supported = model_def.input_class.model_fields
    filtered = {key: value for key, value in input_data.items() if key in supported}
    try:
        return model_def.validate_input(filtered)
    except ValueError as e:
        raise ApplicationError(
            f'Invalid input for model {model_def.id}: {e}',
            type='InvalidModelInput',
            non_retryable=True,
        ) from e


async def run_prediction(model_def: ModelDefinition, typed_input: ModelInput, stage: str) -> ReplicatePrediction:
    """Run a prediction on Replicate, heartbeating `{stage, progress}` on every poll.

    Progress is estimated from the model's average generation time and capped at 95.
    """
    provider_config = model_def.get_provider_config(Provider.REPLICATE)
    expected_seconds = model_def.avg_generation_time_seconds or 60.0
    started_at = datetime.now(timezone.utc)

    def on_poll(prediction: ReplicatePrediction) -> None:
        elapsed = (datetime.now(timezone.utc) - started_at).total_seconds()
        progress = min(95, int(elapsed / expected_seconds * 100))
        activity.heartbeat({'stage': stage, 'progress': progress, 'status': prediction.status.value})

    activity.heartbeat({'stage': stage, 'progress': 0, 'status': 'starting'})

    payload = typed_input.to_replicate()
    for key in FILE_INPUT_KEYS:
        if isinstance(payload.get(key), str):
            payload[key] = as_model_file(payload[key])

    client = ReplicateClient()
    prediction = await client.run(
        model=provider_config.get_full_model_string(),
        input=payload,
        on_poll=on_poll,
    )

    if not prediction.get_output_url():
        raise RuntimeError(f'{model_def.name} returned no output (prediction {prediction.id})')

    return prediction
