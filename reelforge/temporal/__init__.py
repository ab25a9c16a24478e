"""Temporal workflow orchestration for Reelforge.

This package contains:
- activities: Individual tasks (Replicate generations, platform gateway calls)
- workflows: Orchestration logic (single video, series, viral batch supervisor)
- worker: Worker process that executes workflows
- client: Client for starting/signalling/querying workflows
- schemas: Shared data types

Quick Start:
    # Start Temporal (dev mode)
    temporal server start-dev

    # Start the worker
    python -m reelforge.temporal.worker

    # Start a workflow
    from reelforge.temporal.client import execute_workflow
    from reelforge.temporal.schemas import SingleVideoInput
    from reelforge.temporal.workflows import SingleVideoWorkflow

    result = await execute_workflow(
        SingleVideoWorkflow.run,
        SingleVideoInput(character_prompt='...', video_prompt='...'),
    )
"""

from reelforge.temporal.schemas import (
    PipelineResult,
    PipelineStage,
    SingleVideoInput,
    WorkflowInput,
    WorkflowProgress,
)

__all__ = [
    'PipelineResult',
    'PipelineStage',
    'SingleVideoInput',
    'WorkflowInput',
    'WorkflowProgress',
]


# Lazy imports for client utilities (avoid circular imports)
def get_temporal_client():
    """Get or create the Temporal client."""
    from reelforge.temporal.client import get_temporal_client as _get_client

    return _get_client()


def start_workflow(*args, **kwargs):
    """Start a workflow and return a handle."""
    from reelforge.temporal.client import start_workflow as _start

    return _start(*args, **kwargs)
