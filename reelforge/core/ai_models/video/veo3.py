"""Veo 3 video generation models by Google.

Two tiers share one input schema:
- veo-3-fast: cheaper, lower latency (the pipeline default)
- veo-3: standard quality

Available on:
- Replicate: google/veo-3-fast, google/veo-3
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
from reelforge.core.ai_models.common import AspectRatio
from reelforge.core.ai_models.registry import model_registry


class Veo3Input(ModelInput):
    """Input schema for Veo 3 models."""

    prompt: str = Field(..., description='Text prompt for video generation')
    image: str | None = Field(None, description='First frame of the video (URL or file)')
    negative_prompt: str = Field('', description='Things you do not want to see in the video')
    aspect_ratio: AspectRatio = Field(AspectRatio.LANDSCAPE_16_9, description='Aspect ratio of the video')
    duration: Literal[4, 6, 8] = Field(8, description='Duration of the video in seconds')
    resolution: Literal['720p', '1080p'] = Field('720p', description='Output resolution')
    generate_audio: bool = Field(True, description='Generate a soundtrack with the video')
    seed: int | None = Field(None, description='Random seed, omit for random')

    def to_replicate(self) -> dict[str, Any]:
        """Convert to Replicate API format."""
        result: dict[str, Any] = {
            'prompt': self.prompt,
            'duration': self.duration,
            'aspect_ratio': self.aspect_ratio.value,
            'resolution': self.resolution,
            'generate_audio': self.generate_audio,
        }

        if self.image:
            result['image'] = self.image
        if self.negative_prompt:
            result['negative_prompt'] = self.negative_prompt
        if self.seed is not None:
            result['seed'] = self.seed

        return result


class Veo3Model(ModelDefinition):
    """Veo 3 model definition."""

    input_class = Veo3Input


Veo3Fast = Veo3Model(
    id='veo-3-fast',
    name='Veo 3 Fast',
    category=ModelCategory.VIDEO,
    capabilities=[ModelCapability.TEXT_TO_VIDEO, ModelCapability.IMAGE_TO_VIDEO],
    description='Faster and cheaper Veo 3 tier. Default model for the single video pipeline.',
    author='Google',
    cost_per_run=1.20,
    avg_generation_time_seconds=90.0,
    provider_configs={
        Provider.REPLICATE: ProviderConfig(
            provider=Provider.REPLICATE,
            model_id='google/veo-3-fast',
        ),
    },
)

Veo3 = Veo3Model(
    id='veo-3',
    name='Veo 3',
    category=ModelCategory.VIDEO,
    capabilities=[ModelCapability.TEXT_TO_VIDEO, ModelCapability.IMAGE_TO_VIDEO],
    description='Standard Veo 3 tier with higher fidelity and native audio.',
    author='Google',
    cost_per_run=3.20,
    avg_generation_time_seconds=180.0,
    provider_configs={
        Provider.REPLICATE: ProviderConfig(
            provider=Provider.REPLICATE,
            model_id='google/veo-3',
        ),
    },
)

model_registry.register(Veo3Fast)
model_registry.register(Veo3)
