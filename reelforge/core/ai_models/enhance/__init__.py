"""Video enhancement models."""

from reelforge.core.ai_models.enhance.topaz import TopazUpscale, TopazUpscaleInput

__all__ = [
    'TopazUpscale',
    'TopazUpscaleInput',
]
