"""Viral content pipeline - the batch supervisor.

An operations control loop that runs until cancelled (or `max_batches`):

1. Warm up accounts that are still `warming` (once, at start)
2. Per batch: generate persona x series items as SingleVideoWorkflow
   children, in chunks, with item-level retry
3. Distribute every success, wait, measure, replicate viral hits
4. Health-check every account and rotate the unhealthy ones
5. Sleep until the next batch

Pause and cancel are honoured before every chunk, before distribution and
during every wait, so no new child pipeline starts once cancel arrives.
Every `batches_per_run` batches the supervisor continues as new, carrying
its metrics, batch count, scale and pause flag forward.

Metrics live on the workflow instance and are exposed through queries.
"""

import asyncio
import math
from datetime import timedelta

from temporalio import workflow
from temporalio.exceptions import ApplicationError, is_cancelled_exception

from reelforge.temporal.workflows.base import (
    SLOW_RETRY,
    failure_message,
    run_activity,
    validate_secret,
)
from reelforge.temporal.workflows.single_video import SingleVideoWorkflow

with workflow.unsafe.imports_passed_through():
    from reelforge.core.services.platforms.schemas import AccountStatus
    from reelforge.temporal.activities import (
        analyze_performance,
        check_account_health,
        distribute_content,
        generate_variation,
        rotate_proxy,
        warm_up_account,
    )
    from reelforge.temporal.prompts import build_item_prompts
    from reelforge.temporal.schemas import (
        AccountHealthInput,
        BatchMetrics,
        BatchResult,
        BatchStatus,
        ContentItem,
        DistributeContentInput,
        Persona,
        PerformanceInput,
        PerformanceReport,
        SeriesTemplate,
        SingleVideoInput,
        SupervisorState,
        VariationInput,
        ViralContent,
        ViralPipelineInput,
    )

MIN_SCALE = 0.1
MAX_SCALE = 10.0


def clamp_scale(factor: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, factor))


def effective_batch_size(batch_size: int, scale_factor: float) -> int:
    """Items per persona x series pair for the next batch (at least one)."""
    return max(1, math.floor(batch_size * scale_factor))


def replication_count(viral_score: float, divisor: float = 20.0) -> int:
    """Number of variations spawned for a viral hit: one per `divisor` score points."""
    return math.ceil(viral_score / divisor)


def _is_cancellation(error: BaseException) -> bool:
    return isinstance(error, asyncio.CancelledError) or is_cancelled_exception(error)


@workflow.defn
class ViralContentPipelineWorkflow:
    """Supervisor that keeps producing, publishing and measuring content."""

    @workflow.init
    def __init__(self, input: ViralPipelineInput) -> None:
        state = input.state or SupervisorState()

        self._paused = state.paused
        self._cancel_requested = False
        self._running = False
        self._scale_factor = state.scale_factor
        self._current_batch = state.batches_completed
        self._batches_completed = state.batches_completed
        self._batches_this_run = 0
        self._persona_count = len(input.personas)
        self._last_update = None

        self._metrics: BatchMetrics = state.metrics.model_copy()
        self._viral_content: list[ViralContent] = []
        self._outputs: list[ContentItem] = []
        self._errors: list[str] = []

    # -------------------------------------------------------------------------
    # Signals & queries
    # -------------------------------------------------------------------------

    @workflow.signal(name='pause')
    def pause(self) -> None:
        self._paused = True
        self._touch()

    @workflow.signal(name='resume')
    def resume(self) -> None:
        self._paused = False
        self._touch()

    @workflow.signal(name='cancel')
    def cancel(self) -> None:
        self._cancel_requested = True
        self._touch()

    @workflow.signal(name='scale')
    def scale(self, factor: float) -> None:
        """Scale the next batch. Clamped to [0.1, 10]."""
        self._scale_factor = clamp_scale(factor)
        workflow.logger.info(f'Scale factor set to {self._scale_factor}')
        self._touch()

    @workflow.query(name='getMetrics')
    def get_metrics(self) -> BatchMetrics:
        return self._metrics

    @workflow.query(name='getStatus')
    def get_status(self) -> BatchStatus:
        return BatchStatus(
            is_running=self._running,
            is_paused=self._paused,
            current_batch=self._current_batch,
            scale_factor=self._scale_factor,
            active_personas=self._persona_count * self._scale_factor,
            last_update=self._last_update,
        )

    def _touch(self) -> None:
        self._last_update = workflow.now()

    # -------------------------------------------------------------------------
    # Main loop
    # -------------------------------------------------------------------------

    @workflow.run
    async def run(self, input: ViralPipelineInput) -> BatchResult:
        validate_secret(input)

        self._running = True
        self._touch()
        cancelled = False

        try:
            # Accounts are warmed once, not again after continue-as-new
            if input.state is None:
                await self._warm_up_accounts(input)

            while input.max_batches is None or self._batches_completed < input.max_batches:
                if await self._checkpoint(input):
                    cancelled = True
                    break

                self._current_batch += 1
                self._touch()
                if not await self._run_batch(input):
                    cancelled = True
                    break
                self._batches_completed += 1
                self._batches_this_run += 1
                self._touch()

                if input.max_batches is not None and self._batches_completed >= input.max_batches:
                    break

                await self._sleep(input.batch_interval_seconds)

                if self._batches_this_run >= input.batches_per_run and not self._cancel_requested:
                    workflow.logger.info(f'Continuing as new after {self._batches_completed} batches')
                    workflow.continue_as_new(input.model_copy(update={'state': self._state()}))
        except BaseException as e:
            if not _is_cancellation(e):
                raise
            cancelled = True
            workflow.logger.info('Viral pipeline cancelled')

        self._running = False
        cancelled = cancelled or self._cancel_requested
        workflow.logger.info(
            f'Viral pipeline stopped after {self._batches_completed} batches: '
            f'{self._metrics.total_videos_generated} videos, {len(self._errors)} errors'
        )

        return BatchResult(
            metrics=self._metrics,
            viral_content=list(self._viral_content),
            outputs=list(self._outputs),
            errors=list(self._errors),
            batches_completed=self._batches_completed,
            cancelled=cancelled,
        )

    def _state(self) -> SupervisorState:
        return SupervisorState(
            metrics=self._metrics,
            batches_completed=self._batches_completed,
            scale_factor=self._scale_factor,
            paused=self._paused,
        )

    async def _checkpoint(self, input: ViralPipelineInput) -> bool:
        """Block while paused. Returns True once cancel was requested."""
        while self._paused and not self._cancel_requested:
            try:
                await workflow.wait_condition(
                    lambda: not self._paused or self._cancel_requested,
                    timeout=timedelta(seconds=input.pause_poll_seconds),
                )
            except asyncio.TimeoutError:
                pass
        return self._cancel_requested

    async def _sleep(self, seconds: float) -> None:
        """Durable sleep that wakes early on cancel."""
        try:
            await workflow.wait_condition(lambda: self._cancel_requested, timeout=timedelta(seconds=seconds))
        except asyncio.TimeoutError:
            pass

    async def _warm_up_accounts(self, input: ViralPipelineInput) -> None:
        warming = [
            AccountHealthInput(platform=target.name, account_id=account.id)
            for target in input.target_platforms
            for account in target.accounts
            if account.status == AccountStatus.WARMING
        ]
        if not warming:
            return

        workflow.logger.info(f'Warming up {len(warming)} accounts')
        results = await asyncio.gather(
            *(
                run_activity(
                    warm_up_account,
                    account,
                    timeout_minutes=8 * 24 * 60,
                    heartbeat_seconds=600,
                    retry_policy=SLOW_RETRY,
                )
                for account in warming
            ),
            return_exceptions=True,
        )
        for account, result in zip(warming, results, strict=True):
            if isinstance(result, BaseException):
                if _is_cancellation(result):
                    raise result
                self._errors.append(
                    f'Warm-up failed for {account.platform.value}:{account.account_id}: {failure_message(result)}'
                )

    async def _run_batch(self, input: ViralPipelineInput) -> bool:
        """Run one batch. Returns False when cancel cut it short."""
        size = effective_batch_size(input.batch_size, self._scale_factor)
        items = [
            (persona, series, index)
            for persona in input.personas
            for series in input.series
            for index in range(size)
        ]
        workflow.logger.info(f'Batch {self._current_batch}: {len(items)} items (scale {self._scale_factor})')

        for start in range(0, len(items), input.chunk_size):
            if await self._checkpoint(input):
                workflow.logger.info(f'Batch {self._current_batch} stopped with {start}/{len(items)} items started')
                return False

            chunk = items[start : start + input.chunk_size]
            results = await asyncio.gather(
                *(self._generate_item(input, persona, series, index) for persona, series, index in chunk),
                return_exceptions=True,
            )

            successes: list[ContentItem] = []
            for (persona, series, index), result in zip(chunk, results, strict=True):
                if isinstance(result, BaseException):
                    if _is_cancellation(result):
                        raise result
                    self._errors.append(
                        f'Content generation failed for {persona.id}/{series.id}#{index}: {failure_message(result)}'
                    )
                    continue

                successes.append(result)
                self._outputs.append(result)
                self._metrics.total_videos_generated += 1

            if await self._checkpoint(input):
                return False

            reports = await asyncio.gather(
                *(self._distribute_and_measure(input, item) for item in successes),
                return_exceptions=True,
            )
            for item, report in zip(successes, reports, strict=True):
                if isinstance(report, BaseException):
                    if _is_cancellation(report):
                        raise report
                    self._errors.append(f'Distribution failed for {item.id}: {failure_message(report)}')
                    continue
                if report is not None:
                    await self._record_performance(input, item, report)

        if self._cancel_requested:
            return False

        await self._check_accounts(input)
        return True

    async def _generate_item(
        self,
        input: ViralPipelineInput,
        persona: Persona,
        series: SeriesTemplate,
        index: int,
    ) -> ContentItem:
        """Run one SingleVideoWorkflow child, retrying with linear backoff."""
        prompts = build_item_prompts(persona, series, index)
        child_input = SingleVideoInput(
            secret_key=input.secret_key,
            character_prompt=prompts.character_prompt,
            video_prompt=prompts.video_prompt,
            duration=input.duration,
            aspect_ratio=input.aspect_ratio,
            model=input.model,
            enhance=input.enhance,
        )
        base_id = f'{workflow.info().workflow_id}-b{self._current_batch}-{persona.id}-{series.id}-{index}'
        last_error = 'unknown error'

        for attempt in range(1, input.item_max_attempts + 1):
            child_id = f'{base_id}-a{attempt}'
            try:
                result = await workflow.execute_child_workflow(SingleVideoWorkflow.run, child_input, id=child_id)
            except Exception as e:
                if _is_cancellation(e):
                    raise
                last_error = failure_message(e)
            else:
                # Spend of failed attempts is still spend
                self._metrics.costs += result.total_cost
                if result.success and result.final_video_path:
                    return ContentItem(
                        id=child_id,
                        persona_id=persona.id,
                        series_id=series.id,
                        index=index,
                        hook=prompts.hook,
                        hashtags=prompts.hashtags,
                        video_path=result.final_video_path,
                        character_image_path=result.character_image_path,
                        cost=result.total_cost,
                        workflow_id=child_id,
                    )
                last_error = result.error or 'pipeline returned no video'

            workflow.logger.warning(f'Item {base_id} attempt {attempt} failed: {last_error}')
            if attempt < input.item_max_attempts:
                await self._sleep(attempt * input.item_retry_backoff_seconds)
                if self._cancel_requested:
                    raise ApplicationError(f'{last_error} (retry skipped, cancel requested)', non_retryable=True)

        raise ApplicationError(f'{last_error} (after {input.item_max_attempts} attempts)', non_retryable=True)

    async def _distribute_and_measure(self, input: ViralPipelineInput, item: ContentItem) -> PerformanceReport | None:
        """Publish an item and measure it. None when cancel arrived before the measurement."""
        distributions = await run_activity(
            distribute_content,
            DistributeContentInput(content=item, platforms=input.target_platforms),
            timeout_minutes=30,
            retry_policy=SLOW_RETRY,
        )

        # Give the posts time to collect engagement
        await self._sleep(input.measurement_delay_seconds)
        if self._cancel_requested:
            return None

        return await run_activity(
            analyze_performance,
            PerformanceInput(content_id=item.id, distributions=distributions),
            timeout_minutes=10,
            retry_policy=SLOW_RETRY,
        )

    async def _record_performance(
        self,
        input: ViralPipelineInput,
        item: ContentItem,
        report: PerformanceReport,
    ) -> None:
        metrics = self._metrics
        metrics.items_measured += 1
        metrics.total_views += report.views
        metrics.average_engagement += (report.engagement - metrics.average_engagement) / metrics.items_measured
        metrics.revenue = metrics.total_views * input.revenue_per_view

        if report.viral_score <= input.viral_threshold:
            return

        metrics.viral_hits += 1
        self._viral_content.append(
            ViralContent(
                id=item.id,
                persona_id=item.persona_id,
                series_id=item.series_id,
                platform=report.best_platform,
                views=report.views,
                engagement=report.engagement,
                viral_score=report.viral_score,
                url=report.url,
            )
        )

        if not input.generate_variations or self._cancel_requested:
            return

        count = replication_count(report.viral_score, input.replication_divisor)
        workflow.logger.info(f'Viral hit {item.id} (score {report.viral_score}), queueing {count} variations')

        variations = await asyncio.gather(
            *(
                run_activity(
                    generate_variation,
                    VariationInput(content=item, variation_index=i, unit_cost=input.variation_unit_cost),
                    retry_policy=SLOW_RETRY,
                )
                for i in range(count)
            ),
            return_exceptions=True,
        )
        for i, variation in enumerate(variations):
            if isinstance(variation, BaseException):
                if _is_cancellation(variation):
                    raise variation
                self._errors.append(f'Variation {i} of {item.id} failed: {failure_message(variation)}')
                continue
            metrics.costs += variation.cost

    async def _check_accounts(self, input: ViralPipelineInput) -> None:
        """Health-check every account and rotate the proxy of unhealthy ones."""
        for target in input.target_platforms:
            for account in target.accounts:
                account_input = AccountHealthInput(platform=target.name, account_id=account.id)
                try:
                    health = await run_activity(check_account_health, account_input, retry_policy=SLOW_RETRY)
                    if health.needs_rotation:
                        workflow.logger.info(f'Rotating proxy for {target.name.value}:{account.id} ({health.status})')
                        await run_activity(rotate_proxy, account_input, retry_policy=SLOW_RETRY)
                except Exception as e:
                    if _is_cancellation(e):
                        raise
                    self._errors.append(
                        f'Account check failed for {target.name.value}:{account.id}: {failure_message(e)}'
                    )
