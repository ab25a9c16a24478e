"""Image generation models.

Available models:
- Nano Banana: character image generation by Google
"""

from reelforge.core.ai_models.image.nano_banana import NanoBanana, NanoBananaInput

__all__ = [
    'NanoBanana',
    'NanoBananaInput',
]
