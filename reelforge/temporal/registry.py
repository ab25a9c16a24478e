"""Auto-discovery of Temporal workflows and activities.

Scans the workflows and activities modules for decorated functions/classes.
All workflows and activities are automatically discovered - no manual registration needed.
"""

import importlib
import inspect
import logging
import pkgutil
import sys
from typing import Any

logger = logging.getLogger(__name__)


def discover_workflows(package_name: str = 'reelforge.temporal.workflows') -> list[type]:
    """Discover all @workflow.defn decorated classes in a package.

    Recursively scans subpackages. Classes with `__temporal_workflow_definition`
    attribute are discovered, each once even if re-exported by several modules.
    """
    workflows: list[type] = []

    try:
        package = importlib.import_module(package_name)
    except ImportError:
        logger.exception(f'Failed to import workflow package {package_name}')
        return workflows

    for _, module_name, is_pkg in pkgutil.iter_modules(package.__path__):
        if module_name.startswith('_') or module_name == 'base':
            continue

        full_module_name = f'{package_name}.{module_name}'

        if is_pkg:
            workflows.extend(w for w in discover_workflows(full_module_name) if w not in workflows)
            continue

        try:
            module = importlib.import_module(full_module_name)
        except ImportError:
            logger.exception(f'Failed to import workflow module {full_module_name}')
            continue

        for _name, obj in inspect.getmembers(module, inspect.isclass):
            if hasattr(obj, '__temporal_workflow_definition') and obj not in workflows:
                workflows.append(obj)
                logger.debug(f'Discovered workflow: {obj.__name__}')

    return workflows


def discover_activities(package_name: str = 'reelforge.temporal.activities') -> list[Any]:
    """Discover all @activity.defn decorated functions in a package.

    Scans all Python files in the package for functions with
    `__temporal_activity_definition` attribute.

    Import errors are logged AND printed to stderr for visibility.
    """
    activities: list[Any] = []

    try:
        package = importlib.import_module(package_name)
    except ImportError:
        msg = f'Failed to import activities package {package_name}'
        logger.exception(msg)
        print(f'ERROR: {msg}', file=sys.stderr)
        return activities

    modules_found: list[str] = []
    modules_failed: list[str] = []

    for _, module_name, is_pkg in pkgutil.iter_modules(package.__path__):
        if module_name.startswith('_') or is_pkg:
            continue

        full_module_name = f'{package_name}.{module_name}'

        try:
            module = importlib.import_module(full_module_name)
            modules_found.append(module_name)
        except Exception:
            modules_failed.append(module_name)
            msg = f'Failed to import activity module {full_module_name}'
            logger.exception(msg)
            print(f'ERROR: {msg}', file=sys.stderr)
            continue

        # Only functions defined in this module, so re-exports are not counted twice
        for name, obj in inspect.getmembers(module, inspect.isfunction):
            if hasattr(obj, '__temporal_activity_definition') and obj.__module__ == full_module_name:
                activities.append(obj)
                logger.debug(f'Discovered activity: {name} from {module_name}')

    if modules_failed:
        print(f'WARNING: Failed to import {len(modules_failed)} activity modules: {modules_failed}', file=sys.stderr)

    logger.info(f'Activity discovery: {len(modules_found)} modules loaded, {len(activities)} activities found')

    return activities
