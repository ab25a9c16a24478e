"""Video generation models.

Available models:
- Veo 3 / Veo 3 Fast: image-to-video generation by Google
- Kling v2.1: image-to-video generation by Kuaishou
"""

from reelforge.core.ai_models.video.kling import Kling, KlingInput
from reelforge.core.ai_models.video.veo3 import Veo3, Veo3Fast, Veo3Input

__all__ = [
    # Veo 3
    'Veo3',
    'Veo3Fast',
    'Veo3Input',
    # Kling
    'Kling',
    'KlingInput',
]
