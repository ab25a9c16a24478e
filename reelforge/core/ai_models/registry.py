"""AI model registry with auto-discovery.

Models are automatically discovered and registered by scanning the
image/, video/ and enhance/ subdirectories. Each model file calls
`model_registry.register(MyModel)` at module level.

Usage:
    # Discover and register all models (call once at startup)
    from reelforge.core.ai_models.registry import discover_models
    discover_models()

    # Then use the registry
    from reelforge.core.ai_models.registry import model_registry
    model = model_registry.get_or_raise('veo-3-fast', ModelCategory.VIDEO)
"""

import importlib
import logging
import pkgutil
import sys

from reelforge.core.ai_models.base import (
    ModelCategory,
    ModelDefinition,
    Provider,
)

logger = logging.getLogger(__name__)


class ModelNotFoundError(ValueError):
    """Raised when a model id is not registered (or registered under another category)."""


class ModelRegistry:
    """Registry of all available AI models."""

    def __init__(self):
        self._models: dict[str, ModelDefinition] = {}

    def register(self, model: ModelDefinition) -> None:
        """Register a model."""
        self._models[model.id] = model

    def get(self, model_id: str) -> ModelDefinition | None:
        """Get a model by ID."""
        return self._models.get(model_id)

    def get_or_raise(self, model_id: str, category: ModelCategory | None = None) -> ModelDefinition:
        """Get a model by ID, optionally checking its category.

        Raises:
            ModelNotFoundError: If the model is unknown or belongs to another category.
        """
        model = self._models.get(model_id)
        if model is None or (category is not None and model.category != category):
            scope = category or 'any'
            available = [m.id for m in self.list_by_category(category)] if category else self.list_ids()
            raise ModelNotFoundError(
                f"Model '{model_id}' not found in registry ({scope}). Available models: {available}"
            )
        return model

    def list_all(self) -> list[ModelDefinition]:
        """List all registered models."""
        return list(self._models.values())

    def list_by_category(self, category: ModelCategory) -> list[ModelDefinition]:
        """List models by category."""
        return [m for m in self._models.values() if m.category == category]

    def list_by_provider(self, provider: Provider) -> list[ModelDefinition]:
        """List models that support a specific provider."""
        return [m for m in self._models.values() if m.supports_provider(provider)]

    def list_ids(self) -> list[str]:
        """List all model IDs."""
        return list(self._models.keys())

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._models

    def __len__(self) -> int:
        return len(self._models)


# Global registry
model_registry = ModelRegistry()

# Model category subdirectories to scan
MODEL_CATEGORIES = ['image', 'video', 'enhance']


class _DiscoveryState:
    done = False


def discover_models(base_package: str = 'reelforge.core.ai_models') -> dict[str, list[str]]:
    """Discover and register all AI models by scanning category subdirectories.

    Returns:
        Dict mapping category to list of registered model IDs.
        Example: {'image': ['nano-banana'], 'video': ['veo-3-fast', 'veo-3'], 'enhance': ['topaz-upscale']}

    Raises:
        RuntimeError: If no models were registered (indicates a problem).
    """
    registered: dict[str, list[str]] = {}
    modules_loaded = 0
    modules_failed: list[str] = []

    models_before = set(model_registry.list_ids())

    for category in MODEL_CATEGORIES:
        category_package = f'{base_package}.{category}'
        registered[category] = []

        try:
            package = importlib.import_module(category_package)
        except ImportError:
            msg = f'Failed to import model category package {category_package}'
            logger.exception(msg)
            print(f'ERROR: {msg}', file=sys.stderr)
            continue

        if not hasattr(package, '__path__'):
            continue

        for _, module_name, is_pkg in pkgutil.iter_modules(package.__path__):
            if module_name.startswith('_') or is_pkg:
                continue

            full_module_name = f'{category_package}.{module_name}'

            try:
                importlib.import_module(full_module_name)
                modules_loaded += 1
                logger.debug(f'Loaded model module: {full_module_name}')
            except Exception:
                modules_failed.append(full_module_name)
                msg = f'Failed to import model module {full_module_name}'
                logger.exception(msg)
                print(f'ERROR: {msg}', file=sys.stderr)

    new_models = set(model_registry.list_ids()) - models_before

    for model in model_registry.list_all():
        cat = model.category.value
        if cat in registered:
            registered[cat].append(model.id)

    total = len(model_registry)
    logger.info(f'Model discovery: {modules_loaded} modules loaded, {total} models registered')

    if new_models:
        logger.info(f'Newly registered models: {sorted(new_models)}')

    if modules_failed:
        print(f'WARNING: Failed to import {len(modules_failed)} model modules: {modules_failed}', file=sys.stderr)

    if total == 0:
        raise RuntimeError('No AI models registered! Check that model files call model_registry.register().')

    _DiscoveryState.done = True
    return registered


def ensure_models_registered() -> None:
    """Run discover_models() once per process.

    Activities call this before resolving a model id, so a worker that skipped
    startup discovery (or a test) still sees every model.
    """
    if not _DiscoveryState.done:
        logger.info('Running model discovery...')
        discover_models()
