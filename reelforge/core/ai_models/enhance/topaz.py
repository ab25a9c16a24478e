"""Topaz Labs video upscaling model.

Used for the optional enhancement stage. Billed per second of input video.

Available on:
- Replicate: topazlabs/video-upscale
"""

from typing import Any, Literal

from pydantic import Field

from reelforge.core.ai_models.base import (
    ModelCapability,
    ModelCategory,
    ModelDefinition,
    ModelInput,
    Provider,
    ProviderConfig,
)
from reelforge.core.ai_models.registry import model_registry


class TopazUpscaleInput(ModelInput):
    """Input schema for Topaz video upscale."""

    video: str = Field(..., description='Video to upscale (URL or file)')
    target_resolution: Literal['720p', '1080p', '4k'] = Field('1080p', description='Output resolution')
    target_fps: int = Field(30, ge=15, le=60, description='Output frame rate')
    duration: float = Field(8.0, gt=0, description='Length of the source video, used for pricing')

    def billable_seconds(self) -> float:
        return self.duration

    def to_replicate(self) -> dict[str, Any]:
        """Convert to Replicate API format."""
        return {
            'video': self.video,
            'target_resolution': self.target_resolution,
            'target_fps': self.target_fps,
        }


class TopazUpscaleModel(ModelDefinition):
    """Topaz video upscale model definition."""

    input_class = TopazUpscaleInput


TopazUpscale = TopazUpscaleModel(
    id='topaz-upscale',
    name='Topaz Video Upscale',
    category=ModelCategory.ENHANCE,
    capabilities=[ModelCapability.VIDEO_UPSCALING],
    description='Video upscaling and frame interpolation by Topaz Labs.',
    author='Topaz Labs',
    cost_per_second=0.01,
    avg_generation_time_seconds=60.0,
    provider_configs={
        Provider.REPLICATE: ProviderConfig(
            provider=Provider.REPLICATE,
            model_id='topazlabs/video-upscale',
        ),
    },
)

model_registry.register(TopazUpscale)
