"""Base workflow utilities to reduce boilerplate.

Provides:
- WorkflowContext: pause/cancel flags, checkpoints and per-stage accounting
  with a stage() context manager
- run_activity(): Simplified activity execution
- failure_message(): Human readable message of an activity/child failure
- Standard retry policies
"""

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError, ApplicationError, ChildWorkflowError

with workflow.unsafe.imports_passed_through():
    from reelforge.temporal.schemas import SeriesProgress, StageMetrics, WorkflowInput, WorkflowProgress

# Standard retry policies
FAST_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=1),
    maximum_attempts=3,
)

SLOW_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=5),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(minutes=10),
    maximum_attempts=3,
)

# Image/video generation: each attempt may already be billed, so keep it to 3
GENERATION_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=10),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(minutes=5),
    maximum_attempts=3,
)

CANCELLED_MESSAGE = 'Workflow cancelled by user'

ProgressT = TypeVar('ProgressT', WorkflowProgress, SeriesProgress)


def validate_secret(input: WorkflowInput) -> None:
    """Validate the workflow secret key if auth is enabled.

    Raises:
        ApplicationError: If secret auth is enabled but key is missing or invalid.
                          Error is non-retryable to prevent brute force attempts.
    """
    # Import config here to avoid sandbox issues
    with workflow.unsafe.imports_passed_through():
        from reelforge.core.configs import app_config

    if not app_config.WORKFLOW_SECRET_ENABLED:
        return

    if not app_config.WORKFLOW_SECRET_KEY:
        raise ApplicationError(
            'WORKFLOW_SECRET_KEY not configured on server',
            non_retryable=True,
        )

    if input.secret_key != app_config.WORKFLOW_SECRET_KEY:
        raise ApplicationError(
            'Authentication failed: invalid secret_key',
            non_retryable=True,
        )


def failure_message(error: BaseException) -> str:
    """Message of the innermost cause of an activity or child workflow failure."""
    while isinstance(error, ActivityError | ChildWorkflowError) and error.cause is not None:
        error = error.cause
    return str(error) or type(error).__name__


class WorkflowContext(Generic[ProgressT]):
    """Shared context for pipeline workflows.

    Owns the cooperative pause/cancel flags and the progress snapshot that
    queries read. Every stage starts with a checkpoint: it blocks while
    paused and fails with a non-retryable error once cancel was requested.

    Usage:
        ctx = WorkflowContext(WorkflowProgress())
        ctx.start(input)  # Pass workflow input for secret validation

        async with ctx.stage(PipelineStage.GENERATING_CHARACTER, 'character', 10) as metrics:
            result = await run_activity(generate_character_image, ...)
            metrics.cost = result.total_cost

        ctx.complete(PipelineStage.COMPLETE)
    """

    def __init__(self, progress: ProgressT) -> None:
        self.progress = progress
        self.stages: dict[str, StageMetrics] = {}
        self._paused = False
        self._cancel_requested = False
        self._started_at: datetime | None = None

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def start(self, input: WorkflowInput) -> None:
        """Start the clock and validate the secret key if auth is enabled."""
        self._started_at = workflow.now()
        validate_secret(input)

    def elapsed(self) -> float:
        """Seconds since start(), measured with workflow time."""
        if self._started_at is None:
            return 0.0
        return (workflow.now() - self._started_at).total_seconds()

    # Signal handlers delegate here. Repeating a signal has no further effect.

    def pause(self) -> None:
        self._paused = True
        self.progress.paused = True

    def resume(self) -> None:
        self._paused = False
        self.progress.paused = False

    def cancel(self) -> None:
        self._cancel_requested = True

    async def checkpoint(self) -> None:
        """Block while paused, then fail if cancellation was requested."""
        await workflow.wait_condition(lambda: not self._paused)
        if self._cancel_requested:
            raise ApplicationError(CANCELLED_MESSAGE, non_retryable=True)

    @asynccontextmanager
    async def stage(
        self,
        stage: Enum,
        key: str,
        start_progress: int,
    ) -> AsyncGenerator[StageMetrics, None]:
        """Context manager for one pipeline stage.

        Yields the stage's StageMetrics; the body sets its cost. The stage is
        recorded, with its wall clock time, only if the body succeeds.

        Example:
            async with ctx.stage(PipelineStage.GENERATING_VIDEO, 'video', 50) as metrics:
                result = await run_activity(generate_video_from_image, ...)
                metrics.cost = result.cost
        """
        await self.checkpoint()

        self.progress.current_stage = stage
        self.progress.overall_progress = max(self.progress.overall_progress, start_progress)
        if isinstance(self.progress, WorkflowProgress):
            self.progress.stage_progress = 0

        started_at = workflow.now()
        metrics = StageMetrics()

        yield metrics

        metrics.time = (workflow.now() - started_at).total_seconds()
        self.stages[key] = metrics
        self.progress.total_cost = self.total_cost
        if isinstance(self.progress, WorkflowProgress):
            self.progress.stage_progress = 100

    @property
    def total_cost(self) -> float:
        """Sum of the costs of all completed stages."""
        return sum(metrics.cost for metrics in self.stages.values())

    def advance(self, overall_progress: int) -> None:
        """Move overall progress forward. Never moves it back."""
        self.progress.overall_progress = max(self.progress.overall_progress, min(overall_progress, 100))

    def complete(self, stage: Enum) -> None:
        self.progress.current_stage = stage
        self.progress.overall_progress = 100
        self.progress.total_cost = self.total_cost

    def fail(self, stage: Enum, error: str) -> None:
        """Freeze progress at the last checkpoint and record the error."""
        self.progress.current_stage = stage
        self.progress.error = error
        self.progress.total_cost = self.total_cost


async def run_activity(
    activity: Callable | str,
    *args: Any,
    timeout_minutes: float = 5.0,
    heartbeat_seconds: float | None = None,
    retry_policy: RetryPolicy | None = None,
) -> Any:
    """Run an activity with standard configuration.

    Args:
        activity: Activity function or string name
        *args: Activity arguments (single input or multiple positional args)
        timeout_minutes: Activity timeout
        heartbeat_seconds: Heartbeat interval for long activities
        retry_policy: Retry configuration

    Examples:
        # Single input (Pydantic model)
        result = await run_activity(check_account_health, AccountHealthInput(...))

        # Long running generation
        result = await run_activity(
            generate_video_from_image,
            VideoFromImageInput(...),
            timeout_minutes=30,
            heartbeat_seconds=120,
            retry_policy=GENERATION_RETRY,
        )
    """
    exec_kwargs: dict[str, Any] = {
        'start_to_close_timeout': timedelta(minutes=timeout_minutes),
        'retry_policy': retry_policy or FAST_RETRY,
    }

    if heartbeat_seconds:
        exec_kwargs['heartbeat_timeout'] = timedelta(seconds=heartbeat_seconds)

    if len(args) == 1:
        return await workflow.execute_activity(activity, args[0], **exec_kwargs)
    return await workflow.execute_activity(activity, args=args, **exec_kwargs)
