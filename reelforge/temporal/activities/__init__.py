"""Temporal activities - individual tasks that interact with external services.

Activities are the building blocks of workflows. Each activity:
- Performs a single, focused task
- Can be retried independently
- Has configurable timeouts
- Reports heartbeats for long-running operations

## Auto-Discovery

Activities are AUTOMATICALLY discovered by the worker via `discover_activities()`.
Just decorate a function with `@activity.defn` and it will be registered.
No need to add anything to this file.

## Infrastructure Used

- Model Registry for AI model definitions
- ReplicateClient for image/video generation and enhancement
- PlatformService (HTTP gateway) for uploads, metrics and accounts

## Convenience Imports

The imports below are for workflow convenience only - they don't affect registration.
"""

from reelforge.temporal.activities.accounts import check_account_health, rotate_proxy, warm_up_account
from reelforge.temporal.activities.distribution import (
    analyze_performance,
    distribute_content,
    generate_variation,
)
from reelforge.temporal.activities.image import generate_character_image
from reelforge.temporal.activities.video import enhance_video, generate_video_from_image

__all__ = [
    # Generation
    'generate_character_image',
    'generate_video_from_image',
    'enhance_video',
    # Distribution
    'distribute_content',
    'analyze_performance',
    'generate_variation',
    # Accounts
    'check_account_health',
    'rotate_proxy',
    'warm_up_account',
]
