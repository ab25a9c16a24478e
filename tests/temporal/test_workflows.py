"""Tests for Temporal workflows.

These tests use Temporal's testing framework which runs workflows
in-memory WITHOUT needing a Temporal server. Activities are replaced by
fakes registered under the real activity names.

Run tests:
    pytest tests/temporal/test_workflows.py -v
"""

import asyncio
import uuid

import pytest
from temporalio import activity
from temporalio.client import WorkflowFailureError, WorkflowHandle
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.exceptions import ApplicationError
from temporalio.testing import WorkflowEnvironment
from temporalio.worker import Replayer, Worker

from reelforge.core.services.platforms.schemas import AccountConfig, AccountStatus, PlatformName, PlatformTarget
from reelforge.temporal.schemas import (
    AccountHealth,
    AccountHealthInput,
    CharacterImageInput,
    CharacterImageOutput,
    DistributeContentInput,
    Distribution,
    EnhanceVideoInput,
    EnhanceVideoOutput,
    GeneratedImage,
    GeneratedVideo,
    PerformanceInput,
    PerformanceReport,
    PipelineStage,
    Persona,
    ProxyRotationOutput,
    SeriesScenario,
    SeriesTemplate,
    SeriesVideoInput,
    SingleVideoInput,
    VariationInput,
    VariationModifications,
    VariationOutput,
    VideoFromImageInput,
    VideoFromImageOutput,
    ViralPipelineInput,
)
from reelforge.temporal.workflows import SeriesVideoWorkflow, SingleVideoWorkflow, ViralContentPipelineWorkflow
from reelforge.temporal.workflows.base import CANCELLED_MESSAGE

TASK_QUEUE = 'test-queue'

IMAGE_COST = 1.0
VIDEO_COST = 2.0
ENHANCE_COST = 0.5

# =============================================================================
# Fake activities
# =============================================================================


@activity.defn(name='generate_character_image')
async def fake_character_image(input: CharacterImageInput) -> CharacterImageOutput:
    if 'Broken' in input.prompt:
        raise ApplicationError('image model rejected the prompt', non_retryable=True)
    return CharacterImageOutput(
        images=[
            GeneratedImage(
                image_path='generated/images/character.png',
                source_url='https://cdn.test/character.png',
                cost=IMAGE_COST,
            )
        ],
        total_cost=IMAGE_COST,
        total_time=1.0,
        model_used=input.model,
    )


@activity.defn(name='generate_video_from_image')
async def fake_video(input: VideoFromImageInput) -> VideoFromImageOutput:
    if 'fail' in input.prompt:
        raise ApplicationError('video model unavailable', non_retryable=True)
    assert input.first_frame == 'https://cdn.test/character.png'
    return VideoFromImageOutput(
        videos=[GeneratedVideo(video_path='generated/videos/video.mp4', source_url='https://cdn.test/video.mp4')],
        cost=VIDEO_COST,
        total_time=2.0,
        model_used=input.model,
    )


@activity.defn(name='enhance_video')
async def fake_enhance(input: EnhanceVideoInput) -> EnhanceVideoOutput:
    assert input.video == 'https://cdn.test/video.mp4'
    return EnhanceVideoOutput(
        video_path='generated/enhanced/video.mp4',
        cost=ENHANCE_COST,
        total_time=3.0,
        model_used=input.model,
    )


GENERATION_ACTIVITIES = [fake_character_image, fake_video, fake_enhance]


class FakePlatform:
    """Platform activities that record what the supervisor asked for."""

    def __init__(self, views: int = 50000, viral_score: int = 85, unhealthy: tuple[str, ...] = ()):
        self.views = views
        self.viral_score = viral_score
        self.unhealthy = unhealthy
        self.distributed: list[str] = []
        self.variations: list[int] = []
        self.rotated: list[str] = []
        self.warmed: list[str] = []

    @activity.defn(name='distribute_content')
    async def distribute_content(self, input: DistributeContentInput) -> list[Distribution]:
        self.distributed.append(input.content.id)
        return [
            Distribution(
                platform=target.name,
                account_id=account.id,
                status='published',
                post_id=f'post-{input.content.id}',
                url=f'https://{target.name.value}.test/{input.content.id}',
            )
            for target in input.platforms
            for account in target.accounts
            if account.status == AccountStatus.ACTIVE
        ]

    @activity.defn(name='analyze_performance')
    async def analyze_performance(self, input: PerformanceInput) -> PerformanceReport:
        return PerformanceReport(
            content_id=input.content_id,
            views=self.views,
            likes=self.views // 10,
            engagement=12.5,
            viral_score=self.viral_score,
            best_platform=input.distributions[0].platform if input.distributions else None,
        )

    @activity.defn(name='generate_variation')
    async def generate_variation(self, input: VariationInput) -> VariationOutput:
        self.variations.append(input.variation_index)
        return VariationOutput(
            queued_id=f'queued-{input.variation_index}',
            variation_index=input.variation_index,
            modifications=VariationModifications(speed=1.0, filter='none', crop='original', audio='original'),
            scheduled_for='2026-01-01T00:00:00Z',
            cost=input.unit_cost,
        )

    @activity.defn(name='check_account_health')
    async def check_account_health(self, input: AccountHealthInput) -> AccountHealth:
        blocked = input.account_id in self.unhealthy
        return AccountHealth(needs_rotation=blocked, status='flagged' if blocked else 'active')

    @activity.defn(name='rotate_proxy')
    async def rotate_proxy(self, input: AccountHealthInput) -> ProxyRotationOutput:
        self.rotated.append(input.account_id)
        return ProxyRotationOutput(account_id=input.account_id, proxy='http://proxy-2.test:8080')

    @activity.defn(name='warm_up_account')
    async def warm_up_account(self, input: AccountHealthInput) -> None:
        self.warmed.append(input.account_id)

    @property
    def activities(self) -> list:
        return [
            self.distribute_content,
            self.analyze_performance,
            self.generate_variation,
            self.check_account_health,
            self.rotate_proxy,
            self.warm_up_account,
        ]


class GatedCharacterImage:
    """Character image activity that holds until the test releases it."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    @activity.defn(name='generate_character_image')
    async def generate_character_image(self, input: CharacterImageInput) -> CharacterImageOutput:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return await fake_character_image(input)


class RecordingVideo:
    """Video activity that records every prompt it was asked to animate."""

    def __init__(self) -> None:
        self.prompts: list[str] = []

    @activity.defn(name='generate_video_from_image')
    async def generate_video_from_image(self, input: VideoFromImageInput) -> VideoFromImageOutput:
        self.prompts.append(input.prompt)
        return await fake_video(input)


# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
async def workflow_environment():
    """Create a test workflow environment.

    This runs Temporal in-memory - no server needed!
    """
    async with await WorkflowEnvironment.start_time_skipping(data_converter=pydantic_data_converter) as env:
        yield env


@pytest.fixture
async def worker(workflow_environment):
    """Worker with the video pipelines and fake generation activities."""
    async with Worker(
        workflow_environment.client,
        task_queue=TASK_QUEUE,
        workflows=[SingleVideoWorkflow, SeriesVideoWorkflow],
        activities=GENERATION_ACTIVITIES,
    ):
        yield workflow_environment


@pytest.fixture
def single_input(faker) -> SingleVideoInput:
    return SingleVideoInput(
        character_prompt=f'Portrait of {faker.name()}, studio lighting',
        video_prompt='The character waves at the camera',
    )


@pytest.fixture
def gated_character() -> GatedCharacterImage:
    return GatedCharacterImage()


@pytest.fixture
def recording_video() -> RecordingVideo:
    return RecordingVideo()


@pytest.fixture
async def gated_worker(workflow_environment, gated_character, recording_video):
    """Worker whose character stage holds until released.

    Nothing is cached, so every workflow task rebuilds the workflow by
    replaying its history.
    """
    async with Worker(
        workflow_environment.client,
        task_queue=TASK_QUEUE,
        workflows=[SingleVideoWorkflow],
        activities=[gated_character.generate_character_image, recording_video.generate_video_from_image, fake_enhance],
        max_cached_workflows=0,
    ):
        yield workflow_environment


def _workflow_id(prefix: str) -> str:
    return f'{prefix}-{uuid.uuid4().hex[:8]}'


async def _query_until(handle: WorkflowHandle, query, predicate, attempts: int = 50):
    """Query until `predicate` holds (the first workflow task may not have run yet)."""
    value = None
    for _ in range(attempts):
        value = await handle.query(query)
        if predicate(value):
            return value
        await asyncio.sleep(0.1)
    raise AssertionError(f'{query} never satisfied the predicate, last value: {value}')


async def _wait_for(predicate, attempts: int = 100) -> None:
    """Poll a test-side condition, such as a fake activity having been called."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.1)
    raise AssertionError('condition never became true')


# =============================================================================
# Single video pipeline
# =============================================================================


class TestSingleVideoWorkflow:
    """Tests for the SingleVideoWorkflow."""

    async def test_successful_execution(self, worker, single_input):
        """Character image costs 1.0 and video 2.0, so the pipeline costs 3.0."""
        result = await worker.client.execute_workflow(
            SingleVideoWorkflow.run,
            single_input,
            id=_workflow_id('single'),
            task_queue=TASK_QUEUE,
        )

        assert result.success is True
        assert result.error is None
        assert result.character_image_path == 'generated/images/character.png'
        assert result.video_path == 'generated/videos/video.mp4'
        assert result.enhanced_video_path is None
        assert result.final_video_path == 'generated/videos/video.mp4'
        assert result.total_cost == pytest.approx(IMAGE_COST + VIDEO_COST)
        assert list(result.stages) == ['character', 'video']
        assert result.total_cost == pytest.approx(sum(stage.cost for stage in result.stages.values()))

    async def test_enhancement_stage(self, worker, single_input):
        result = await worker.client.execute_workflow(
            SingleVideoWorkflow.run,
            single_input.model_copy(update={'enhance': True}),
            id=_workflow_id('single-enhance'),
            task_queue=TASK_QUEUE,
        )

        assert result.success is True
        assert list(result.stages) == ['character', 'video', 'enhance']
        assert result.final_video_path == 'generated/enhanced/video.mp4'
        assert result.total_cost == pytest.approx(IMAGE_COST + VIDEO_COST + ENHANCE_COST)

    async def test_final_progress_query(self, worker, single_input):
        handle = await worker.client.start_workflow(
            SingleVideoWorkflow.run,
            single_input,
            id=_workflow_id('single-progress'),
            task_queue=TASK_QUEUE,
        )
        await handle.result()

        progress = await handle.query(SingleVideoWorkflow.progress)
        assert progress.current_stage == PipelineStage.COMPLETE
        assert progress.overall_progress == 100
        assert progress.total_cost == pytest.approx(IMAGE_COST + VIDEO_COST)
        assert await handle.query(SingleVideoWorkflow.status) == 'complete'
        assert await handle.query(SingleVideoWorkflow.total_cost) == pytest.approx(IMAGE_COST + VIDEO_COST)

    async def test_cancel_before_first_stage(self, worker, single_input):
        handle = await worker.client.start_workflow(
            SingleVideoWorkflow.run,
            single_input,
            id=_workflow_id('single-cancel'),
            task_queue=TASK_QUEUE,
            start_signal='cancel',
        )
        result = await handle.result()

        assert result.success is False
        assert result.error == CANCELLED_MESSAGE
        assert result.stages == {}
        assert result.total_cost == 0.0
        progress = await handle.query(SingleVideoWorkflow.progress)
        assert progress.current_stage == PipelineStage.FAILED

    async def test_pause_blocks_until_resume(self, worker, single_input):
        handle = await worker.client.start_workflow(
            SingleVideoWorkflow.run,
            single_input,
            id=_workflow_id('single-pause'),
            task_queue=TASK_QUEUE,
            start_signal='pause',
        )

        progress = await _query_until(handle, SingleVideoWorkflow.progress, lambda p: p.paused)
        assert progress.current_stage == PipelineStage.INITIALIZING
        assert progress.overall_progress == 0

        # A second pause changes nothing, one resume is enough
        await handle.signal(SingleVideoWorkflow.pause)
        await handle.signal(SingleVideoWorkflow.resume)

        result = await handle.result()
        assert result.success is True
        assert result.total_cost == pytest.approx(IMAGE_COST + VIDEO_COST)

    async def test_resume_without_pause_is_a_noop(self, worker, single_input):
        handle = await worker.client.start_workflow(
            SingleVideoWorkflow.run,
            single_input,
            id=_workflow_id('single-resume'),
            task_queue=TASK_QUEUE,
            start_signal='resume',
        )
        result = await handle.result()

        assert result.success is True
        assert list(result.stages) == ['character', 'video']
        assert result.total_cost == pytest.approx(IMAGE_COST + VIDEO_COST)
        progress = await handle.query(SingleVideoWorkflow.progress)
        assert progress.paused is False

    async def test_failing_activity_is_attempted_three_times(self, workflow_environment, single_input):
        attempts: list[int] = []

        @activity.defn(name='generate_video_from_image')
        async def flaky_video(input: VideoFromImageInput) -> VideoFromImageOutput:
            attempts.append(activity.info().attempt)
            raise RuntimeError('provider unavailable')

        async with Worker(
            workflow_environment.client,
            task_queue=TASK_QUEUE,
            workflows=[SingleVideoWorkflow],
            activities=[fake_character_image, flaky_video],
        ):
            result = await workflow_environment.client.execute_workflow(
                SingleVideoWorkflow.run,
                single_input,
                id=_workflow_id('single-retry'),
                task_queue=TASK_QUEUE,
            )

        assert attempts == [1, 2, 3]
        assert result.success is False
        assert 'provider unavailable' in result.error
        # The completed character stage keeps its cost
        assert list(result.stages) == ['character']
        assert result.total_cost == pytest.approx(IMAGE_COST)

    async def test_invalid_secret_fails_workflow(self, worker, single_input, monkeypatch):
        from reelforge.core.configs import app_config

        monkeypatch.setattr(app_config, 'WORKFLOW_SECRET_ENABLED', True)
        monkeypatch.setattr(app_config, 'WORKFLOW_SECRET_KEY', 'top-secret')

        with pytest.raises(WorkflowFailureError):
            await worker.client.execute_workflow(
                SingleVideoWorkflow.run,
                single_input.model_copy(update={'secret_key': 'wrong'}),
                id=_workflow_id('single-auth'),
                task_queue=TASK_QUEUE,
            )


class TestSingleVideoCheckpoints:
    """Signals arriving while a stage is running take effect at the next stage."""

    async def test_pause_after_character_holds_the_video_stage(
        self, gated_worker, gated_character, recording_video, single_input
    ):
        handle = await gated_worker.client.start_workflow(
            SingleVideoWorkflow.run,
            single_input,
            id=_workflow_id('single-pause-mid'),
            task_queue=TASK_QUEUE,
        )
        await asyncio.wait_for(gated_character.started.wait(), timeout=10)
        await handle.signal(SingleVideoWorkflow.pause)
        gated_character.release.set()

        progress = await _query_until(handle, SingleVideoWorkflow.progress, lambda p: p.total_cost > 0)
        assert progress.paused is True
        assert progress.current_stage == PipelineStage.GENERATING_CHARACTER
        assert progress.overall_progress == 40
        assert progress.total_cost == pytest.approx(IMAGE_COST)

        await asyncio.sleep(0.5)
        progress = await handle.query(SingleVideoWorkflow.progress)
        assert progress.overall_progress == 40
        assert recording_video.prompts == []

        await handle.signal(SingleVideoWorkflow.resume)
        result = await handle.result()

        assert result.success is True
        assert recording_video.prompts == [single_input.video_prompt]
        assert result.total_cost == pytest.approx(IMAGE_COST + VIDEO_COST)

    async def test_cancel_between_stages_keeps_completed_cost(
        self, gated_worker, gated_character, recording_video, single_input
    ):
        handle = await gated_worker.client.start_workflow(
            SingleVideoWorkflow.run,
            single_input,
            id=_workflow_id('single-cancel-mid'),
            task_queue=TASK_QUEUE,
        )
        await asyncio.wait_for(gated_character.started.wait(), timeout=10)
        await handle.signal(SingleVideoWorkflow.cancel)
        gated_character.release.set()
        result = await handle.result()

        assert result.success is False
        assert result.error == CANCELLED_MESSAGE
        assert list(result.stages) == ['character']
        assert result.total_cost == pytest.approx(IMAGE_COST)
        assert recording_video.prompts == []

        progress = await handle.query(SingleVideoWorkflow.progress)
        assert progress.current_stage == PipelineStage.FAILED
        assert progress.overall_progress == 40

    async def test_progress_never_moves_back(self, gated_worker, gated_character, single_input):
        handle = await gated_worker.client.start_workflow(
            SingleVideoWorkflow.run,
            single_input.model_copy(update={'enhance': True}),
            id=_workflow_id('single-monotonic'),
            task_queue=TASK_QUEUE,
        )
        await asyncio.wait_for(gated_character.started.wait(), timeout=10)
        samples = [(await handle.query(SingleVideoWorkflow.progress)).overall_progress]
        gated_character.release.set()

        for _ in range(200):
            progress = await handle.query(SingleVideoWorkflow.progress)
            samples.append(progress.overall_progress)
            if progress.current_stage == PipelineStage.COMPLETE:
                break
            await asyncio.sleep(0.05)
        else:
            raise AssertionError(f'pipeline never completed, samples: {samples}')

        assert samples == sorted(samples)
        assert samples[0] == 10
        assert samples[-1] == 100

    async def test_replay_does_not_rerun_completed_stages(
        self, gated_worker, gated_character, recording_video, single_input
    ):
        handle = await gated_worker.client.start_workflow(
            SingleVideoWorkflow.run,
            single_input.model_copy(update={'enhance': True}),
            id=_workflow_id('single-replay'),
            task_queue=TASK_QUEUE,
        )
        await asyncio.wait_for(gated_character.started.wait(), timeout=10)
        await handle.signal(SingleVideoWorkflow.pause)
        gated_character.release.set()
        await _query_until(handle, SingleVideoWorkflow.progress, lambda p: p.overall_progress == 40)
        await handle.signal(SingleVideoWorkflow.resume)
        result = await handle.result()

        # The worker caches nothing, so every task above was a full replay
        assert gated_character.calls == 1
        assert len(recording_video.prompts) == 1
        assert result.total_cost == pytest.approx(IMAGE_COST + VIDEO_COST + ENHANCE_COST)

        replayer = Replayer(workflows=[SingleVideoWorkflow], data_converter=pydantic_data_converter)
        replay = await replayer.replay_workflow(await handle.fetch_history())
        assert replay.replay_failure is None


# =============================================================================
# Series pipeline
# =============================================================================


class TestSeriesVideoWorkflow:
    async def test_one_character_many_videos(self, worker):
        result = await worker.client.execute_workflow(
            SeriesVideoWorkflow.run,
            SeriesVideoInput(
                character_prompt='A cheerful chef in a bright kitchen',
                scenarios=[
                    SeriesScenario(video_prompt='Chopping onions'),
                    SeriesScenario(video_prompt='This one will fail'),
                    SeriesScenario(video_prompt='Plating the dish', duration=4),
                ],
            ),
            id=_workflow_id('series'),
            task_queue=TASK_QUEUE,
        )

        assert result.success is True
        assert result.character_image_path == 'generated/images/character.png'
        assert [video.success for video in result.videos] == [True, False, True]
        assert result.videos[1].error == 'video model unavailable'
        assert list(result.stages) == ['character', 'video_1', 'video_2', 'video_3']
        assert result.total_cost == pytest.approx(IMAGE_COST + 2 * VIDEO_COST)

    async def test_cancel_before_character(self, worker):
        handle = await worker.client.start_workflow(
            SeriesVideoWorkflow.run,
            SeriesVideoInput(
                character_prompt='A cheerful chef',
                scenarios=[SeriesScenario(video_prompt='Chopping onions')],
            ),
            id=_workflow_id('series-cancel'),
            task_queue=TASK_QUEUE,
            start_signal='cancel',
        )
        result = await handle.result()

        assert result.success is False
        assert result.error == CANCELLED_MESSAGE
        assert result.total_cost == 0.0


# =============================================================================
# Viral content pipeline
# =============================================================================


def _viral_input(**overrides) -> ViralPipelineInput:
    values = dict(
        personas=[
            Persona(id='alice', name='Alice', appearance='red hair, freckles', niche='fitness'),
            Persona(id='broken', name='Broken', appearance='glitch'),
        ],
        series=[SeriesTemplate(id='tips', name='Daily tips', hooks=['Stop doing this'], hashtags=['fitness'])],
        target_platforms=[
            PlatformTarget(
                name=PlatformName.TIKTOK,
                accounts=[
                    AccountConfig(id='acc-1', username='alice_fit', status=AccountStatus.ACTIVE),
                    AccountConfig(id='acc-2', username='alice_fit2', status=AccountStatus.WARMING),
                ],
            )
        ],
        max_batches=1,
        item_retry_backoff_seconds=1,
        measurement_delay_seconds=60,
        batch_interval_seconds=60,
        pause_poll_seconds=5,
    )
    values.update(overrides)
    return ViralPipelineInput(**values)


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform(unhealthy=('acc-1',))


@pytest.fixture
async def viral_worker(workflow_environment, platform):
    async with Worker(
        workflow_environment.client,
        task_queue=TASK_QUEUE,
        workflows=[ViralContentPipelineWorkflow, SingleVideoWorkflow],
        activities=[*GENERATION_ACTIVITIES, *platform.activities],
    ):
        yield workflow_environment


class TestViralContentPipelineWorkflow:
    async def test_failing_item_does_not_stop_the_batch(self, viral_worker, platform):
        result = await viral_worker.client.execute_workflow(
            ViralContentPipelineWorkflow.run,
            _viral_input(),
            id=_workflow_id('viral'),
            task_queue=TASK_QUEUE,
        )

        assert result.cancelled is False
        assert result.batches_completed == 1
        assert [item.persona_id for item in result.outputs] == ['alice']
        assert len(result.errors) == 1
        assert 'broken/tips#0' in result.errors[0]
        assert 'after 3 attempts' in result.errors[0]

        metrics = result.metrics
        assert metrics.total_videos_generated == 1
        assert metrics.items_measured == 1
        assert metrics.total_views == 50000
        assert metrics.average_engagement == pytest.approx(12.5)
        assert metrics.revenue == pytest.approx(5.0)

        # Score 85 with divisor 20 gives five variations
        assert metrics.viral_hits == 1
        assert sorted(platform.variations) == [0, 1, 2, 3, 4]
        assert metrics.costs == pytest.approx(IMAGE_COST + VIDEO_COST + 5 * 0.05)
        assert result.viral_content[0].viral_score == 85

        assert platform.warmed == ['acc-2']
        assert platform.rotated == ['acc-1']

    async def test_below_threshold_is_not_replicated(self, workflow_environment):
        quiet = FakePlatform(views=100, viral_score=10)
        async with Worker(
            workflow_environment.client,
            task_queue=TASK_QUEUE,
            workflows=[ViralContentPipelineWorkflow, SingleVideoWorkflow],
            activities=[*GENERATION_ACTIVITIES, *quiet.activities],
        ):
            result = await workflow_environment.client.execute_workflow(
                ViralContentPipelineWorkflow.run,
                _viral_input(personas=[Persona(id='alice', name='Alice')]),
                id=_workflow_id('viral-quiet'),
                task_queue=TASK_QUEUE,
            )

        assert result.metrics.viral_hits == 0
        assert result.viral_content == []
        assert quiet.variations == []
        assert quiet.rotated == []
        assert result.metrics.costs == pytest.approx(IMAGE_COST + VIDEO_COST)

    async def test_scale_signal_is_clamped(self, viral_worker):
        handle = await viral_worker.client.start_workflow(
            ViralContentPipelineWorkflow.run,
            _viral_input(max_batches=None),
            id=_workflow_id('viral-scale'),
            task_queue=TASK_QUEUE,
            start_signal='pause',
        )

        await handle.signal(ViralContentPipelineWorkflow.scale, 50.0)
        status = await _query_until(handle, ViralContentPipelineWorkflow.get_status, lambda s: s.scale_factor == 10.0)
        assert status.is_paused is True
        assert status.active_personas == pytest.approx(20.0)

        await handle.signal(ViralContentPipelineWorkflow.scale, 0.0)
        status = await _query_until(handle, ViralContentPipelineWorkflow.get_status, lambda s: s.scale_factor == 0.1)
        assert status.current_batch == 0

        await handle.signal(ViralContentPipelineWorkflow.cancel)
        result = await handle.result()
        assert result.cancelled is True
        assert result.batches_completed == 0

    async def test_cancel_returns_summary(self, viral_worker):
        handle = await viral_worker.client.start_workflow(
            ViralContentPipelineWorkflow.run,
            _viral_input(max_batches=None),
            id=_workflow_id('viral-cancel'),
            task_queue=TASK_QUEUE,
            start_signal='cancel',
        )
        result = await handle.result()

        assert result.cancelled is True
        assert result.batches_completed == 0
        assert result.metrics.total_videos_generated == 0

    async def test_continues_as_new_and_carries_metrics(self, viral_worker, platform):
        result = await viral_worker.client.execute_workflow(
            ViralContentPipelineWorkflow.run,
            _viral_input(personas=[Persona(id='alice', name='Alice')], max_batches=3, batches_per_run=1),
            id=_workflow_id('viral-continue'),
            task_queue=TASK_QUEUE,
        )

        assert result.cancelled is False
        assert result.batches_completed == 3
        assert result.metrics.total_videos_generated == 3
        assert result.metrics.items_measured == 3
        assert result.metrics.costs == pytest.approx(3 * (IMAGE_COST + VIDEO_COST + 5 * 0.05))
        assert result.metrics.revenue == pytest.approx(15.0)
        # Outputs cover the last run only, warm-up ran in the first one
        assert len(result.outputs) == 1
        assert platform.warmed == ['acc-2']
        assert platform.rotated == ['acc-1', 'acc-1', 'acc-1']


def _single_account_input(**overrides) -> ViralPipelineInput:
    """One persona and one active account, with a long measurement delay."""
    values = dict(
        personas=[Persona(id='alice', name='Alice')],
        target_platforms=[
            PlatformTarget(
                name=PlatformName.TIKTOK,
                accounts=[AccountConfig(id='acc-1', username='alice_fit', status=AccountStatus.ACTIVE)],
            )
        ],
        batch_size=2,
        chunk_size=1,
        measurement_delay_seconds=3600,
    )
    values.update(overrides)
    return _viral_input(**values)


class TestViralPipelineCheckpoints:
    """Pause and cancel reach the supervisor in the middle of a batch."""

    async def test_cancel_during_measurement_starts_no_more_items(self, workflow_environment, recording_video):
        platform = FakePlatform(unhealthy=('acc-1',))
        async with Worker(
            workflow_environment.client,
            task_queue=TASK_QUEUE,
            workflows=[ViralContentPipelineWorkflow, SingleVideoWorkflow],
            activities=[fake_character_image, recording_video.generate_video_from_image, *platform.activities],
        ):
            handle = await workflow_environment.client.start_workflow(
                ViralContentPipelineWorkflow.run,
                _single_account_input(max_batches=None),
                id=_workflow_id('viral-cancel-mid'),
                task_queue=TASK_QUEUE,
            )
            # The first chunk is published and now waits for engagement
            await _wait_for(lambda: platform.distributed)
            await handle.signal(ViralContentPipelineWorkflow.cancel)
            result = await handle.result()

        assert result.cancelled is True
        assert result.batches_completed == 0
        assert len(recording_video.prompts) == 1
        assert [item.id for item in result.outputs] == platform.distributed
        assert result.metrics.items_measured == 0
        assert platform.variations == []
        assert platform.rotated == []

    async def test_pause_mid_batch_holds_the_next_chunk(self, workflow_environment, recording_video):
        platform = FakePlatform()
        async with Worker(
            workflow_environment.client,
            task_queue=TASK_QUEUE,
            workflows=[ViralContentPipelineWorkflow, SingleVideoWorkflow],
            activities=[fake_character_image, recording_video.generate_video_from_image, *platform.activities],
        ):
            handle = await workflow_environment.client.start_workflow(
                ViralContentPipelineWorkflow.run,
                _single_account_input(),
                id=_workflow_id('viral-pause-mid'),
                task_queue=TASK_QUEUE,
            )
            await _wait_for(lambda: platform.distributed)
            await handle.signal(ViralContentPipelineWorkflow.pause)
            await _query_until(handle, ViralContentPipelineWorkflow.get_status, lambda s: s.is_paused)
            # Give the workflow a moment to start the measurement timer before skipping past it
            await asyncio.sleep(1)
            await workflow_environment.sleep(3700)
            await _query_until(handle, ViralContentPipelineWorkflow.get_metrics, lambda m: m.items_measured == 1)
            await asyncio.sleep(0.5)

            status = await handle.query(ViralContentPipelineWorkflow.get_status)
            assert status.is_paused is True
            assert len(recording_video.prompts) == 1

            await handle.signal(ViralContentPipelineWorkflow.resume)
            result = await handle.result()

        assert result.batches_completed == 1
        assert len(recording_video.prompts) == 2
        assert result.metrics.items_measured == 2
