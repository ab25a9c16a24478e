"""Structured logging service.

Importing the structlog provider configures stdlib logging and structlog once
per process. Use `get_log_service()` (or `reelforge.core.deps.logger`) in
application code; workflows and activities keep using `workflow.logger` and
`activity.logger`, which are replay-aware.
"""

import structlog


def get_log_service(name: str = 'reelforge') -> structlog.stdlib.BoundLogger:
    """Return a configured structlog logger."""
    from reelforge.core.services.log.providers.structlog import setup  # noqa: F401

    return structlog.get_logger(name)


__all__ = ['get_log_service']
