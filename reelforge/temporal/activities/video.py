"""Video generation and enhancement activities using the model registry."""

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
from reelforge.temporal.schemas import (
    EnhanceVideoInput,
    EnhanceVideoOutput,
    GeneratedVideo,
    VideoFromImageInput,
    VideoFromImageOutput,
)


@activity.defn
async def generate_video_from_image(input: VideoFromImageInput) -> VideoFromImageOutput:
    """Animate a character image into a video with a registered video model.

    The first frame is passed both as `image` and `start_image`; each model
    keeps the field it understands.
    """
    started_at = datetime.now(timezone.utc)
    model_def = resolve_model(input.model, ModelCategory.VIDEO)

    first_frame = input.first_frame
    input_data: dict[str, Any] = {
        'prompt': input.prompt,
        'image': first_frame,
        'start_image': first_frame,
        'duration': input.duration,
        'aspect_ratio': input.aspect_ratio,
        **input.model_params,
    }
    typed_input = build_model_input(model_def, input_data)

    activity.logger.info(f'Generating {input.duration}s video with {model_def.name}')

    prediction = await run_prediction(model_def, typed_input, stage='video')

    videos = []
    for source_url in prediction.get_all_output_urls():
        video_path = await download_output(source_url, 'videos', 'mp4', stage='video')
        videos.append(GeneratedVideo(video_path=video_path, source_url=source_url))

    cost = model_def.estimate_cost(typed_input)
    total_time = (datetime.now(timezone.utc) - started_at).total_seconds()

    activity.logger.info(f'Video ready: {videos[0].video_path} (${cost:.4f}, {total_time:.1f}s)')

    return VideoFromImageOutput(videos=videos, cost=cost, total_time=total_time, model_used=model_def.id)


@activity.defn
async def enhance_video(input: EnhanceVideoInput) -> EnhanceVideoOutput:
    """Upscale a generated video with a registered enhancement model."""
    started_at = datetime.now(timezone.utc)
    model_def = resolve_model(input.model, ModelCategory.ENHANCE)

    input_data: dict[str, Any] = {
        'video': input.video,
        'duration': input.duration,
        **input.model_params,
    }
    typed_input = build_model_input(model_def, input_data)

    activity.logger.info(f'Enhancing video with {model_def.name}')

    prediction = await run_prediction(model_def, typed_input, stage='enhance')
    source_url = prediction.get_output_url() or ''
    video_path = await download_output(source_url, 'enhanced', 'mp4', stage='enhance')

    cost = model_def.estimate_cost(typed_input)
    total_time = (datetime.now(timezone.utc) - started_at).total_seconds()

    return EnhanceVideoOutput(
        video_path=video_path,
        source_url=source_url,
        cost=cost,
        total_time=total_time,
        model_used=model_def.id,
    )
