"""Character image generation activity using the model registry."""

from datetime import datetime, timezone
from typing import Any

from temporalio import activity

from reelforge.core.ai_models.base import ModelCategory
from reelforge.temporal.activities.common import (
    build_model_input,
    download_output,
    resolve_model,
    run_prediction,
)
from reelforge.temporal.schemas import CharacterImageInput, CharacterImageOutput, GeneratedImage


@activity.defn
async def generate_character_image(input: CharacterImageInput) -> CharacterImageOutput:
    """Generate `num_images` character images with a registered image model.

    Each image is a separate prediction, downloaded to a fresh local file.

    Raises:
        ApplicationError: (non-retryable) if the model is unknown or the input invalid
    """
    started_at = datetime.now(timezone.utc)
    model_def = resolve_model(input.model, ModelCategory.IMAGE)

    input_data: dict[str, Any] = {
        'prompt': input.prompt,
        'temperature': input.temperature,
        'aspect_ratio': input.aspect_ratio,
        **input.model_params,
    }
    typed_input = build_model_input(model_def, input_data)
    cost_per_image = model_def.estimate_cost(typed_input)

    activity.logger.info(f'Generating {input.num_images} character image(s) with {model_def.name}')

    images: list[GeneratedImage] = []
    for _ in range(input.num_images):
        prediction = await run_prediction(model_def, typed_input, stage='character_image')
        source_url = prediction.get_output_url() or ''
        image_path = await download_output(source_url, 'images', 'png', stage='character_image')
        images.append(GeneratedImage(image_path=image_path, source_url=source_url, cost=cost_per_image))

    total_time = (datetime.now(timezone.utc) - started_at).total_seconds()
    total_cost = round(sum(image.cost for image in images), 6)

    activity.logger.info(f'Character image ready: {images[0].image_path} (${total_cost:.4f}, {total_time:.1f}s)')

    return CharacterImageOutput(
        images=images,
        total_cost=total_cost,
        total_time=total_time,
        model_used=model_def.id,
    )
