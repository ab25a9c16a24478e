"""Prompt templating for batch items.

Deterministic: the same persona, series and index always give the same
prompts, so a replayed batch rebuilds identical child inputs.
"""

from pydantic import BaseModel

from reelforge.temporal.schemas import Persona, SeriesTemplate


class ItemPrompts(BaseModel):
    character_prompt: str
    video_prompt: str
    hook: str
    hashtags: list[str]


def _pick(options: list[str], index: int, default: str = '') -> str:
    return options[index % len(options)] if options else default


def build_item_prompts(persona: Persona, series: SeriesTemplate, index: int) -> ItemPrompts:
    """Prompts for item `index` of a persona x series pair.

    Hooks, topics and styles cycle independently with the index.
    """
    hook = _pick(series.hooks, index, series.name)
    topic = _pick(series.topics, index, persona.niche or series.name)
    style = _pick(series.styles, index, persona.content_style)

    character_parts = [
        f'Photorealistic portrait of {persona.name}',
        persona.appearance,
        f'{persona.personality} expression' if persona.personality else '',
        'consistent character, natural lighting',
    ]
    video_parts = [
        f'{persona.name} delivers the hook "{hook}" about {topic}',
        f'{series.format} format' if series.format else '',
        f'{style} style' if style else '',
        'vertical short-form video, natural movement',
    ]

    return ItemPrompts(
        character_prompt=', '.join(part for part in character_parts if part),
        video_prompt=', '.join(part for part in video_parts if part),
        hook=hook,
        hashtags=list(series.hashtags),
    )
