"""Nano Banana image generation model by Google.

Used for the character image stage.

Available on:
- Replicate: google/nano-banana
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


class NanoBananaInput(ModelInput):
    """Input schema for Nano Banana model."""

    prompt: str = Field(..., description='A text description of the character image')
    image_input: list[str] = Field(
        default_factory=list,
        description='Reference images to keep the character consistent',
    )
    aspect_ratio: AspectRatio = Field(
        AspectRatio.LANDSCAPE_16_9,
        description='Aspect ratio of the generated image',
    )
    output_format: Literal['jpg', 'png'] = Field('png', description='Format of the output image')

    def to_replicate(self) -> dict[str, Any]:
        """Convert to Replicate API format."""
        result: dict[str, Any] = {
            'prompt': self.prompt,
            'output_format': self.output_format,
        }

        if self.image_input:
            result['image_input'] = self.image_input
            result['aspect_ratio'] = 'match_input_image'
        else:
            result['aspect_ratio'] = self.aspect_ratio.value

        return result


class NanoBananaModel(ModelDefinition):
    """Nano Banana model definition."""

    input_class = NanoBananaInput


NanoBanana = NanoBananaModel(
    id='nano-banana',
    name='Nano Banana',
    category=ModelCategory.IMAGE,
    capabilities=[ModelCapability.TEXT_TO_IMAGE, ModelCapability.IMAGE_TO_IMAGE],
    description='Fast character image generation by Google with reference image support.',
    author='Google',
    cost_per_run=0.039,
    avg_generation_time_seconds=10.0,
    provider_configs={
        Provider.REPLICATE: ProviderConfig(
            provider=Provider.REPLICATE,
            model_id='google/nano-banana',
        ),
    },
)

model_registry.register(NanoBanana)
