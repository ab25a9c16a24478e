"""Shared schemas for Temporal workflows and activities.

These are the data contracts between:
- Client -> Workflow (inputs)
- Workflow -> Activities (inputs)
- Activities -> Workflow (outputs)
- Workflow -> Client (outputs, query results)

Everything here is serialized by `pydantic_data_converter`.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from reelforge.core.services.platforms.schemas import PlatformName, PlatformTarget

# =============================================================================
# Pipeline Stages
# =============================================================================


class PipelineStage(str, Enum):
    """Stages of a single video pipeline, in execution order."""

    INITIALIZING = 'initializing'
    GENERATING_CHARACTER = 'generating_character'
    GENERATING_VIDEO = 'generating_video'
    ENHANCING = 'enhancing'
    COMPLETE = 'complete'
    FAILED = 'failed'


VideoTier = Literal['fast', 'standard']
AspectRatioValue = Literal['16:9', '9:16', '1:1']
VideoDuration = Literal[4, 6, 8]

# Video model used for each quality tier when no explicit model is given
VIDEO_TIER_MODELS: dict[str, str] = {
    'fast': 'veo-3-fast',
    'standard': 'veo-3',
}

DEFAULT_IMAGE_MODEL = 'nano-banana'
DEFAULT_ENHANCE_MODEL = 'topaz-upscale'

# =============================================================================
# Base Workflow Input
# =============================================================================


class WorkflowInput(BaseModel):
    """Base input model for all workflows.

    All workflow input models should inherit from this class.
    Provides automatic secret key validation when WORKFLOW_SECRET_ENABLED=True.

    Example:
        class MyWorkflowInput(WorkflowInput):
            topic: str = Field(..., description='Topic to generate')

    When calling with auth enabled:
        await client.start_workflow(
            SingleVideoWorkflow.run,
            SingleVideoInput(
                secret_key='your-secret-key',  # Required when auth enabled
                character_prompt='...',
                video_prompt='...',
            ),
            ...
        )
    """

    secret_key: str | None = Field(
        None,
        description='Secret key for authentication (required when WORKFLOW_SECRET_ENABLED=True)',
    )


# =============================================================================
# Single Video Pipeline
# =============================================================================


class SingleVideoInput(WorkflowInput):
    """Configuration for one character -> video -> enhancement run.

    Immutable once the workflow has started.
    """

    model_config = ConfigDict(frozen=True)

    character_prompt: str = Field(..., min_length=1, description='Prompt for the character image')
    video_prompt: str = Field(..., min_length=1, description='Prompt for the video')
    temperature: float = Field(0.3, ge=0.0, le=2.0, description='Sampling temperature for the image model')
    num_images: int = Field(1, ge=1, le=4, description='Character images to generate, the first one is used')
    duration: VideoDuration = Field(8, description='Video length in seconds')
    aspect_ratio: AspectRatioValue = Field('16:9')
    model: VideoTier = Field('fast', description='Video quality tier, used when video_model is not set')
    platform: PlatformName | None = Field(None, description='Platform the video is optimized for')
    enhance: bool = Field(False, description='Run the enhancement stage after video generation')

    # Model selection (registry ids)
    image_model: str = Field(DEFAULT_IMAGE_MODEL)
    video_model: str | None = Field(None, description='Explicit video model, overrides the tier')
    enhance_model: str = Field(DEFAULT_ENHANCE_MODEL)

    # Per-stage model parameter overrides
    image_model_params: dict[str, Any] = Field(default_factory=dict)
    video_model_params: dict[str, Any] = Field(default_factory=dict)
    enhance_model_params: dict[str, Any] = Field(default_factory=dict)

    @property
    def resolved_video_model(self) -> str:
        return self.video_model or VIDEO_TIER_MODELS[self.model]


class StageMetrics(BaseModel):
    """Wall clock time (seconds) and cost (USD) of one completed stage."""

    time: float = 0.0
    cost: float = 0.0


class WorkflowProgress(BaseModel):
    """Live state of a single video pipeline, returned by the `progress` query."""

    current_stage: PipelineStage = PipelineStage.INITIALIZING
    stage_progress: int = Field(0, ge=0, le=100)
    overall_progress: int = Field(0, ge=0, le=100)
    character_image_path: str | None = None
    video_path: str | None = None
    enhanced_video_path: str | None = None
    total_cost: float = 0.0
    paused: bool = False
    error: str | None = None


class PipelineResult(BaseModel):
    """Terminal result of a single video pipeline (successful or not)."""

    success: bool
    character_image_path: str | None = None
    video_path: str | None = None
    enhanced_video_path: str | None = None
    total_cost: float = 0.0
    total_time: float = Field(0.0, description='Seconds between workflow start and completion')
    stages: dict[str, StageMetrics] = Field(
        default_factory=dict,
        description='Completed stages in execution order (character, video, enhance)',
    )
    error: str | None = None

    @property
    def final_video_path(self) -> str | None:
        return self.enhanced_video_path or self.video_path


# =============================================================================
# Series Pipeline
# =============================================================================


class SeriesScenario(BaseModel):
    """One video of a series. Unset fields fall back to the series defaults."""

    model_config = ConfigDict(frozen=True)

    video_prompt: str = Field(..., min_length=1)
    duration: VideoDuration | None = None
    aspect_ratio: AspectRatioValue | None = None
    model: VideoTier | None = None


class SeriesVideoInput(WorkflowInput):
    """Several videos generated from one shared character image."""

    model_config = ConfigDict(frozen=True)

    character_prompt: str = Field(..., min_length=1)
    scenarios: list[SeriesScenario] = Field(..., min_length=1)
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    duration: VideoDuration = 8
    aspect_ratio: AspectRatioValue = '16:9'
    model: VideoTier = 'fast'
    platform: PlatformName | None = None
    image_model: str = DEFAULT_IMAGE_MODEL
    video_model: str | None = None
    image_model_params: dict[str, Any] = Field(default_factory=dict)
    video_model_params: dict[str, Any] = Field(default_factory=dict)


class SeriesVideoResult(BaseModel):
    """Outcome of one scenario of a series."""

    scenario_index: int
    success: bool
    video_path: str | None = None
    cost: float = 0.0
    time: float = 0.0
    error: str | None = None


class SeriesStage(str, Enum):
    """Stages of a series pipeline."""

    INITIALIZING = 'initializing'
    GENERATING_CHARACTER = 'generating_character'
    GENERATING_VIDEOS = 'generating_videos'
    COMPLETE = 'complete'
    FAILED = 'failed'


class SeriesProgress(BaseModel):
    current_stage: SeriesStage = SeriesStage.INITIALIZING
    character_image_path: str | None = None
    videos_generated: int = 0
    total_videos: int = 0
    current_video_index: int = 0
    overall_progress: int = 0
    total_cost: float = 0.0
    paused: bool = False
    videos: list[SeriesVideoResult] = Field(default_factory=list)
    error: str | None = None


class SeriesResult(BaseModel):
    success: bool
    character_image_path: str | None = None
    videos: list[SeriesVideoResult] = Field(default_factory=list)
    total_cost: float = 0.0
    total_time: float = 0.0
    stages: dict[str, StageMetrics] = Field(default_factory=dict)
    error: str | None = None


# =============================================================================
# Generation Activities
# =============================================================================


class CharacterImageInput(BaseModel):
    prompt: str
    temperature: float = 0.3
    num_images: int = Field(1, ge=1, le=4)
    model: str = DEFAULT_IMAGE_MODEL
    model_params: dict[str, Any] = Field(default_factory=dict)
    aspect_ratio: AspectRatioValue = '16:9'


class GeneratedImage(BaseModel):
    image_path: str = Field(description='Local file the image was written to')
    source_url: str | None = Field(None, description='Provider URL of the image')
    cost: float = 0.0

    @property
    def reference(self) -> str:
        """What to hand to the next model: the provider URL when there is one."""
        return self.source_url or self.image_path


class CharacterImageOutput(BaseModel):
    images: list[GeneratedImage]
    total_cost: float
    total_time: float
    model_used: str


class VideoFromImageInput(BaseModel):
    prompt: str
    first_frame: str = Field(description='URL or local path of the first frame')
    duration: VideoDuration = 8
    aspect_ratio: AspectRatioValue = '16:9'
    model: str = 'veo-3-fast'
    model_params: dict[str, Any] = Field(default_factory=dict)


class GeneratedVideo(BaseModel):
    video_path: str
    source_url: str | None = None

    @property
    def reference(self) -> str:
        return self.source_url or self.video_path


class VideoFromImageOutput(BaseModel):
    videos: list[GeneratedVideo]
    cost: float
    total_time: float
    model_used: str


class EnhanceVideoInput(BaseModel):
    video: str = Field(description='URL or local path of the video to enhance')
    duration: float = Field(8.0, gt=0, description='Length of the source video in seconds')
    model: str = DEFAULT_ENHANCE_MODEL
    model_params: dict[str, Any] = Field(default_factory=dict)


class EnhanceVideoOutput(BaseModel):
    video_path: str
    source_url: str | None = None
    cost: float
    total_time: float
    model_used: str


# =============================================================================
# Distribution & Account Activities
# =============================================================================


class ContentItem(BaseModel):
    """A generated video produced by the batch pipeline."""

    id: str
    persona_id: str
    series_id: str
    index: int = 0
    hook: str = ''
    hashtags: list[str] = Field(default_factory=list)
    video_path: str
    character_image_path: str | None = None
    cost: float = 0.0
    workflow_id: str | None = None


class Distribution(BaseModel):
    """Result of publishing content from one account."""

    platform: PlatformName
    account_id: str
    status: Literal['published', 'failed']
    post_id: str | None = None
    url: str | None = None
    error: str | None = None


class DistributeContentInput(BaseModel):
    content: ContentItem
    platforms: list[PlatformTarget]


class PerformanceInput(BaseModel):
    content_id: str
    distributions: list[Distribution]


class PerformanceReport(BaseModel):
    content_id: str
    views: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0
    engagement: float = Field(0.0, description='(likes + comments + shares) / views, in percent')
    viral_score: int = Field(0, ge=0, le=100)
    best_platform: PlatformName | None = None
    url: str | None = None


class VariationModifications(BaseModel):
    speed: float
    filter: str
    crop: str
    audio: str


class VariationInput(BaseModel):
    content: ContentItem
    variation_index: int = Field(..., ge=0)
    stagger_seconds: int = Field(3600, description='Delay between queued variations')
    unit_cost: float = Field(0.05, ge=0, description='Estimated cost of producing one variation')


class VariationOutput(BaseModel):
    queued_id: str
    variation_index: int
    modifications: VariationModifications
    scheduled_for: datetime
    cost: float


class AccountHealthInput(BaseModel):
    platform: PlatformName
    account_id: str


class AccountHealth(BaseModel):
    needs_rotation: bool
    status: str
    warnings: list[str] = Field(default_factory=list)


class ProxyRotationOutput(BaseModel):
    account_id: str
    proxy: str


# =============================================================================
# Batch / Scheduling Pipeline
# =============================================================================


class Persona(BaseModel):
    """A recurring on-screen character the batch pipeline produces content for."""

    id: str
    name: str
    appearance: str = Field('', description='Visual description used in the character prompt')
    niche: str = ''
    personality: str = ''
    content_style: str = ''


class SeriesTemplate(BaseModel):
    """A recurring content format. Items cycle through its hooks and topics."""

    id: str
    name: str
    format: str = ''
    hooks: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    styles: list[str] = Field(default_factory=list)
    hashtags: list[str] = Field(default_factory=list)


class BatchMetrics(BaseModel):
    """Aggregate metrics of a supervisor run, returned by `getMetrics`."""

    total_videos_generated: int = 0
    total_views: int = 0
    viral_hits: int = 0
    items_measured: int = 0
    average_engagement: float = 0.0
    costs: float = 0.0
    revenue: float = 0.0


class SupervisorState(BaseModel):
    """Supervisor state carried into the next run on continue-as-new."""

    metrics: BatchMetrics = Field(default_factory=BatchMetrics)
    batches_completed: int = 0
    scale_factor: float = 1.0
    paused: bool = False


class ViralPipelineInput(WorkflowInput):
    """Configuration of the batch supervisor loop."""

    model_config = ConfigDict(frozen=True)

    personas: list[Persona] = Field(..., min_length=1)
    series: list[SeriesTemplate] = Field(..., min_length=1)
    target_platforms: list[PlatformTarget] = Field(default_factory=list)

    batch_size: int = Field(1, ge=1, description='Items per persona x series pair, before scaling')
    viral_threshold: float = Field(70.0, ge=0, le=100)
    chunk_size: int = Field(10, ge=1)

    # Item-level retry (linear backoff)
    item_max_attempts: int = Field(3, ge=1)
    item_retry_backoff_seconds: float = Field(60.0, ge=0)

    # Timing
    measurement_delay_seconds: float = Field(3600.0, ge=0)
    batch_interval_seconds: float = Field(3 * 3600.0, ge=0)
    pause_poll_seconds: float = Field(300.0, gt=0)

    # Economics
    replication_divisor: float = Field(20.0, gt=0, description='One variation per this many viral score points')
    variation_unit_cost: float = Field(0.05, ge=0)
    revenue_per_view: float = Field(0.0001, ge=0)
    generate_variations: bool = True

    max_batches: int | None = Field(None, ge=1, description='Stop after this many batches, None runs forever')
    batches_per_run: int = Field(20, ge=1, description='Continue as new after this many batches')

    # Set by the supervisor itself when it continues as new
    state: SupervisorState | None = None

    # Defaults for every generated item
    duration: VideoDuration = 8
    aspect_ratio: AspectRatioValue = '9:16'
    model: VideoTier = 'fast'
    enhance: bool = False


class BatchStatus(BaseModel):
    """Supervisor state, returned by `getStatus`."""

    is_running: bool = True
    is_paused: bool = False
    current_batch: int = 0
    scale_factor: float = 1.0
    active_personas: float = 0.0
    last_update: datetime | None = None


class ViralContent(BaseModel):
    id: str
    persona_id: str
    series_id: str
    platform: PlatformName | None = None
    views: int = 0
    engagement: float = 0.0
    viral_score: int = 0
    url: str | None = None


class BatchResult(BaseModel):
    metrics: BatchMetrics
    viral_content: list[ViralContent] = Field(default_factory=list)
    outputs: list[ContentItem] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    batches_completed: int = 0
    cancelled: bool = False
