"""Series video pipeline.

Generates one character image and reuses it as the first frame of every
scenario, so the character stays consistent across the series. Each
scenario is its own checkpoint; a failed scenario is recorded and the
series moves on.
"""

from temporalio import workflow

from reelforge.temporal.workflows.base import (
    GENERATION_RETRY,
    WorkflowContext,
    failure_message,
    run_activity,
)

with workflow.unsafe.imports_passed_through():
    from reelforge.temporal.activities import generate_character_image, generate_video_from_image
    from reelforge.temporal.schemas import (
        VIDEO_TIER_MODELS,
        CharacterImageInput,
        SeriesProgress,
        SeriesResult,
        SeriesScenario,
        SeriesStage,
        SeriesVideoInput,
        SeriesVideoResult,
        VideoFromImageInput,
    )

CHARACTER_PROGRESS = 5
VIDEOS_PROGRESS = 20
VIDEOS_PROGRESS_SPAN = 70


@workflow.defn
class SeriesVideoWorkflow:
    """One character, many videos."""

    def __init__(self) -> None:
        self._ctx: WorkflowContext[SeriesProgress] = WorkflowContext(SeriesProgress())

    @workflow.signal(name='pause')
    def pause(self) -> None:
        self._ctx.pause()

    @workflow.signal(name='resume')
    def resume(self) -> None:
        self._ctx.resume()

    @workflow.signal(name='cancel')
    def cancel(self) -> None:
        self._ctx.cancel()

    @workflow.query(name='progress')
    def progress(self) -> SeriesProgress:
        return self._ctx.progress

    @workflow.query(name='totalCost')
    def total_cost(self) -> float:
        return self._ctx.progress.total_cost

    @workflow.query(name='status')
    def status(self) -> str:
        return self._ctx.progress.current_stage.value

    @workflow.run
    async def run(self, input: SeriesVideoInput) -> SeriesResult:
        self._ctx.start(input)
        progress = self._ctx.progress
        progress.total_videos = len(input.scenarios)

        try:
            async with self._ctx.stage(SeriesStage.GENERATING_CHARACTER, 'character', CHARACTER_PROGRESS) as metrics:
                character = await run_activity(
                    generate_character_image,
                    CharacterImageInput(
                        prompt=input.character_prompt,
                        temperature=input.temperature,
                        model=input.image_model,
                        model_params=input.image_model_params,
                        aspect_ratio=input.aspect_ratio,
                    ),
                    timeout_minutes=10,
                    heartbeat_seconds=120,
                    retry_policy=GENERATION_RETRY,
                )
                first_frame = character.images[0].reference
                progress.character_image_path = character.images[0].image_path
                metrics.cost = character.total_cost

            # One stage per scenario, so a cancel between scenarios keeps the cost of finished ones
            for index, scenario in enumerate(input.scenarios):
                start_progress = VIDEOS_PROGRESS + round(index / len(input.scenarios) * VIDEOS_PROGRESS_SPAN)
                stage_key = f'video_{index + 1}'
                async with self._ctx.stage(SeriesStage.GENERATING_VIDEOS, stage_key, start_progress) as metrics:
                    progress.current_video_index = index
                    result = await self._generate_scenario(input, scenario, index, first_frame)
                    progress.videos.append(result)
                    if result.success:
                        progress.videos_generated += 1
                        metrics.cost = result.cost
        except Exception as e:
            error = failure_message(e)
            workflow.logger.error(f'Series pipeline failed: {error}')
            self._ctx.fail(SeriesStage.FAILED, error)
            return self._result(success=False)

        self._ctx.complete(SeriesStage.COMPLETE)
        workflow.logger.info(f'Series complete: {progress.videos_generated}/{progress.total_videos} videos')
        return self._result(success=progress.videos_generated > 0)

    async def _generate_scenario(
        self,
        input: SeriesVideoInput,
        scenario: SeriesScenario,
        index: int,
        first_frame: str,
    ) -> SeriesVideoResult:
        """Generate one scenario. Failures are returned, not raised."""
        tier = scenario.model or input.model
        started_at = workflow.now()

        try:
            video = await run_activity(
                generate_video_from_image,
                VideoFromImageInput(
                    prompt=scenario.video_prompt,
                    first_frame=first_frame,
                    duration=scenario.duration or input.duration,
                    aspect_ratio=scenario.aspect_ratio or input.aspect_ratio,
                    model=input.video_model or VIDEO_TIER_MODELS[tier],
                    model_params=input.video_model_params,
                ),
                timeout_minutes=30,
                heartbeat_seconds=120,
                retry_policy=GENERATION_RETRY,
            )
        except Exception as e:
            error = failure_message(e)
            workflow.logger.warning(f'Scenario {index + 1} failed: {error}')
            return SeriesVideoResult(scenario_index=index, success=False, error=error)

        return SeriesVideoResult(
            scenario_index=index,
            success=True,
            video_path=video.videos[0].video_path,
            cost=video.cost,
            time=(workflow.now() - started_at).total_seconds(),
        )

    def _result(self, success: bool) -> SeriesResult:
        progress = self._ctx.progress
        return SeriesResult(
            success=success,
            character_image_path=progress.character_image_path,
            videos=list(progress.videos),
            total_cost=self._ctx.total_cost,
            total_time=self._ctx.elapsed(),
            stages=dict(self._ctx.stages),
            error=progress.error,
        )
