"""AI model definitions with auto-discovery.

Models are automatically discovered by scanning the image/, video/ and
enhance/ subdirectories. Each model file calls `model_registry.register(MyModel)`
at module level.

Usage:

    # At application startup (e.g., worker.py), discover all models:
    from reelforge.core.ai_models.registry import discover_models
    discover_models()

    # Then use the registry:
    from reelforge.core.ai_models import model_registry, ModelCategory

    model = model_registry.get_or_raise('veo-3-fast', ModelCategory.VIDEO)
    typed_input = model.validate_input({'prompt': 'A fox running', 'duration': 8})
    cost = model.estimate_cost(typed_input)
"""

from reelforge.core.ai_models.base import (
    ModelCapability,
    ModelCategory,
    ModelDefinition,
    ModelInput,
    Provider,
)
from reelforge.core.ai_models.common import AspectRatio, OutputFormat
from reelforge.core.ai_models.registry import (
    ModelNotFoundError,
    discover_models,
    ensure_models_registered,
    model_registry,
)

__all__ = [
    # Common types
    'AspectRatio',
    'OutputFormat',
    # Base types
    'Provider',
    'ModelCategory',
    'ModelCapability',
    'ModelDefinition',
    'ModelInput',
    # Registry & Discovery
    'ModelNotFoundError',
    'model_registry',
    'discover_models',
    'ensure_models_registered',
]
