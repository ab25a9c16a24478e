"""Temporal workflows - orchestration logic for the generation pipelines.

Workflows define the sequence of activities and their dependencies.
They use the base utilities for common patterns like:
- Pause/resume/cancel checkpoints with the stage() context manager
- Per-stage cost and time accounting
- Standard retry policies
"""

from reelforge.temporal.workflows.base import (
    FAST_RETRY,
    GENERATION_RETRY,
    SLOW_RETRY,
    WorkflowContext,
    run_activity,
)
from reelforge.temporal.workflows.series_video import SeriesVideoWorkflow
from reelforge.temporal.workflows.single_video import SingleVideoWorkflow
from reelforge.temporal.workflows.viral_pipeline import ViralContentPipelineWorkflow

__all__ = [
    # Pipelines
    'SingleVideoWorkflow',
    'SeriesVideoWorkflow',
    'ViralContentPipelineWorkflow',
    # Base utilities
    'FAST_RETRY',
    'GENERATION_RETRY',
    'SLOW_RETRY',
    'WorkflowContext',
    'run_activity',
]
