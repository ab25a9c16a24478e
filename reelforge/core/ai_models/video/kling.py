"""Kling v2.1 video generation model by Kuaishou.

Mostly used as an A/B alternative to Veo 3. Billed per second of output.

Available on:
- Replicate: kwaivgi/kling-v2.1
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


class KlingInput(ModelInput):
    """Input schema for Kling v2.1 model."""

    prompt: str = Field(..., description='Text prompt for video generation')
    negative_prompt: str = Field('', description='Things you do not want to see in the video')
    start_image: str | None = Field(None, description='First frame of the video (URL or file)')
    image: str | None = Field(None, description='Alias for start_image')
    aspect_ratio: AspectRatio = Field(
        AspectRatio.LANDSCAPE_16_9,
        description='Aspect ratio of the video. Ignored if start_image is provided.',
    )
    duration: int = Field(5, ge=1, le=10, description='Requested duration, snapped to 5 or 10 seconds')
    mode: Literal['standard', 'pro'] = Field('standard', description='Generation mode')

    @property
    def clip_seconds(self) -> int:
        """Kling only renders 5 or 10 second clips."""
        return 5 if self.duration <= 5 else 10

    def billable_seconds(self) -> float:
        return float(self.clip_seconds)

    def to_replicate(self) -> dict[str, Any]:
        """Convert to Replicate API format."""
        result: dict[str, Any] = {
            'prompt': self.prompt,
            'duration': self.clip_seconds,
            'aspect_ratio': self.aspect_ratio.value,
            'mode': self.mode,
        }

        if self.negative_prompt:
            result['negative_prompt'] = self.negative_prompt

        image_url = self.start_image or self.image
        if image_url:
            result['start_image'] = image_url

        return result


class KlingModel(ModelDefinition):
    """Kling v2.1 model definition."""

    input_class = KlingInput


Kling = KlingModel(
    id='kling-v2.1',
    name='Kling v2.1',
    category=ModelCategory.VIDEO,
    capabilities=[ModelCapability.TEXT_TO_VIDEO, ModelCapability.IMAGE_TO_VIDEO],
    description='Image-to-video model by Kuaishou.',
    author='Kuaishou',
    cost_per_second=0.05,
    avg_generation_time_seconds=150.0,
    provider_configs={
        Provider.REPLICATE: ProviderConfig(
            provider=Provider.REPLICATE,
            model_id='kwaivgi/kling-v2.1',
        ),
    },
)

model_registry.register(Kling)
