"""Shared types for all AI models (image, video, enhancement)."""

from enum import Enum


class AspectRatio(str, Enum):
    """Aspect ratios supported by the generation pipeline.

    Each model handles the conversion to its specific format internally.
    """

    PORTRAIT_9_16 = '9:16'  # TikTok, Reels, Shorts
    LANDSCAPE_16_9 = '16:9'  # YouTube, LinkedIn
    SQUARE = '1:1'  # Instagram feed


class OutputFormat(str, Enum):
    """Output format options for generated media."""

    PNG = 'png'
    JPG = 'jpg'
    WEBP = 'webp'
    MP4 = 'mp4'
    WEBM = 'webm'
