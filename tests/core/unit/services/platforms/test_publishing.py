"""Tests for caption, hashtag and posting-time helpers."""

from datetime import datetime, timezone

import pytest

from reelforge.core.services.platforms import PlatformName
from reelforge.core.services.platforms.publishing import (
    DEFAULT_HASHTAGS,
    build_caption,
    build_hashtags,
    next_optimal_post_time,
)


class TestCaptions:
    def test_platform_suffix(self):
        assert build_caption('Stop doing this', PlatformName.YOUTUBE) == 'Stop doing this #shorts'
        assert build_caption('Stop doing this', PlatformName.TIKTOK).startswith('Stop doing this')

    def test_hashtags_default_and_platform_tags(self):
        tags = build_hashtags(PlatformName.INSTAGRAM)
        assert tags[: len(DEFAULT_HASHTAGS)] == DEFAULT_HASHTAGS
        assert 'reels' in tags

    def test_hashtags_keep_content_tags_first(self):
        assert build_hashtags(PlatformName.TIKTOK, ['fitness'])[0] == 'fitness'


class TestNextOptimalPostTime:
    @pytest.mark.parametrize(
        ('now_hour', 'expected_hour', 'next_day'),
        [
            (5, 6, False),
            (6, 10, False),
            (22, 23, False),
            (23, 6, True),
        ],
    )
    def test_tiktok_slots(self, now_hour, expected_hour, next_day):
        now = datetime(2026, 3, 10, now_hour, 30, tzinfo=timezone.utc)

        slot = next_optimal_post_time(PlatformName.TIKTOK, now)

        assert slot > now
        assert slot.hour == expected_hour
        assert slot.minute == 0
        assert slot.day == (11 if next_day else 10)
