"""Single video pipeline.

Flow: Generate character image → Animate it into a video → (optional) Enhance

Every stage is a checkpoint: completed stages are never re-run on replay,
and pause/cancel signals are honoured before the next stage starts.
"""

from temporalio import workflow

from reelforge.temporal.workflows.base import (
    GENERATION_RETRY,
    WorkflowContext,
    failure_message,
    run_activity,
)

# Activity imports - use pass_through to avoid sandbox restrictions on transitive deps
with workflow.unsafe.imports_passed_through():
    from reelforge.temporal.activities import enhance_video, generate_character_image, generate_video_from_image
    from reelforge.temporal.schemas import (
        CharacterImageInput,
        EnhanceVideoInput,
        PipelineResult,
        PipelineStage,
        SingleVideoInput,
        VideoFromImageInput,
        WorkflowProgress,
    )


@workflow.defn
class SingleVideoWorkflow:
    """Character image → video → optional enhancement, with pause/resume/cancel."""

    def __init__(self) -> None:
        self._ctx: WorkflowContext[WorkflowProgress] = WorkflowContext(WorkflowProgress())

    @workflow.signal(name='pause')
    def pause(self) -> None:
        workflow.logger.info('Pause signal received')
        self._ctx.pause()

    @workflow.signal(name='resume')
    def resume(self) -> None:
        workflow.logger.info('Resume signal received')
        self._ctx.resume()

    @workflow.signal(name='cancel')
    def cancel(self) -> None:
        workflow.logger.info('Cancel signal received')
        self._ctx.cancel()

    @workflow.query(name='progress')
    def progress(self) -> WorkflowProgress:
        return self._ctx.progress

    @workflow.query(name='totalCost')
    def total_cost(self) -> float:
        return self._ctx.progress.total_cost

    @workflow.query(name='status')
    def status(self) -> str:
        return self._ctx.progress.current_stage.value

    @workflow.run
    async def run(self, input: SingleVideoInput) -> PipelineResult:
        self._ctx.start(input)

        try:
            await self._run_stages(input)
        except Exception as e:
            error = failure_message(e)
            workflow.logger.error(f'Single video pipeline failed at {self._ctx.progress.current_stage.value}: {error}')
            self._ctx.fail(PipelineStage.FAILED, error)
            return self._result(success=False)

        self._ctx.complete(PipelineStage.COMPLETE)
        workflow.logger.info(
            f'Single video pipeline complete: ${self._ctx.total_cost:.4f} in {self._ctx.elapsed():.1f}s'
        )
        return self._result(success=True)

    async def _run_stages(self, input: SingleVideoInput) -> None:
        progress = self._ctx.progress

        # Stage 1: Character image
        async with self._ctx.stage(PipelineStage.GENERATING_CHARACTER, 'character', 10) as metrics:
            character = await run_activity(
                generate_character_image,
                CharacterImageInput(
                    prompt=input.character_prompt,
                    temperature=input.temperature,
                    num_images=input.num_images,
                    model=input.image_model,
                    model_params=input.image_model_params,
                    aspect_ratio=input.aspect_ratio,
                ),
                timeout_minutes=10,
                heartbeat_seconds=120,
                retry_policy=GENERATION_RETRY,
            )
            image = character.images[0]
            progress.character_image_path = image.image_path
            metrics.cost = character.total_cost
        self._ctx.advance(40)

        # Stage 2: Video from the character image
        async with self._ctx.stage(PipelineStage.GENERATING_VIDEO, 'video', 50) as metrics:
            video = await run_activity(
                generate_video_from_image,
                VideoFromImageInput(
                    prompt=input.video_prompt,
                    first_frame=image.reference,
                    duration=input.duration,
                    aspect_ratio=input.aspect_ratio,
                    model=input.resolved_video_model,
                    model_params=input.video_model_params,
                ),
                timeout_minutes=30,
                heartbeat_seconds=120,
                retry_policy=GENERATION_RETRY,
            )
            generated = video.videos[0]
            progress.video_path = generated.video_path
            metrics.cost = video.cost
        self._ctx.advance(90)

        # Stage 3 (optional): Enhancement
        if input.enhance:
            async with self._ctx.stage(PipelineStage.ENHANCING, 'enhance', 95) as metrics:
                enhanced = await run_activity(
                    enhance_video,
                    EnhanceVideoInput(
                        video=generated.reference,
                        duration=input.duration,
                        model=input.enhance_model,
                        model_params=input.enhance_model_params,
                    ),
                    timeout_minutes=30,
                    heartbeat_seconds=120,
                    retry_policy=GENERATION_RETRY,
                )
                progress.enhanced_video_path = enhanced.video_path
                metrics.cost = enhanced.cost

    def _result(self, success: bool) -> PipelineResult:
        progress = self._ctx.progress
        return PipelineResult(
            success=success,
            character_image_path=progress.character_image_path,
            video_path=progress.video_path,
            enhanced_video_path=progress.enhanced_video_path,
            total_cost=self._ctx.total_cost,
            total_time=self._ctx.elapsed(),
            stages=dict(self._ctx.stages),
            error=progress.error,
        )
