"""Platform-specific caption, hashtag and posting-time helpers."""

from datetime import datetime, timedelta

from reelforge.core.services.platforms.schemas import PlatformName

# Local hours with the best reach, per platform
OPTIMAL_POST_HOURS: dict[PlatformName, list[int]] = {
    PlatformName.TIKTOK: [6, 10, 19, 23],
    PlatformName.INSTAGRAM: [7, 12, 17, 19],
    PlatformName.YOUTUBE: [9, 12, 15, 20],
}

_CAPTION_SUFFIX: dict[PlatformName, str] = {
    PlatformName.TIKTOK: ' 🔥 #fyp #viral',
    PlatformName.INSTAGRAM: '\n.\n.\n.',
    PlatformName.YOUTUBE: ' #shorts',
}

_PLATFORM_TAGS: dict[PlatformName, list[str]] = {
    PlatformName.TIKTOK: ['fyp', 'foryou', 'foryoupage'],
    PlatformName.INSTAGRAM: ['reels', 'explore', 'instagood'],
    PlatformName.YOUTUBE: ['shorts', 'youtubeshorts'],
}

DEFAULT_HASHTAGS = ['viral', 'trending']


def build_caption(hook: str, platform: PlatformName) -> str:
    return f'{hook}{_CAPTION_SUFFIX.get(platform, "")}'


def build_hashtags(platform: PlatformName, base_tags: list[str] | None = None) -> list[str]:
    return [*(base_tags or DEFAULT_HASHTAGS), *_PLATFORM_TAGS.get(platform, [])]


def next_optimal_post_time(platform: PlatformName, now: datetime) -> datetime:
    """Next optimal posting slot strictly after `now` (rolls over to tomorrow)."""
    hours = OPTIMAL_POST_HOURS.get(platform, [12])
    slot = now.replace(minute=0, second=0, microsecond=0)

    for hour in hours:
        if hour > now.hour:
            return slot.replace(hour=hour)

    return slot.replace(hour=hours[0]) + timedelta(days=1)
