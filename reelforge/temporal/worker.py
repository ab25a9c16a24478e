"""Temporal Worker - runs workflows and activities.

Usage:
    python -m reelforge.temporal.worker
"""

import asyncio
import logging
import signal
import sys
from contextlib import AsyncExitStack
from typing import Any

from temporalio.client import Client
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.worker import Worker

from reelforge.core.configs import app_config
from reelforge.temporal.registry import discover_activities, discover_workflows

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger('temporal.worker')


def _register_ai_models() -> None:
    """Discover and register all AI models (image, video and enhance)."""
    from reelforge.core.ai_models.registry import discover_models

    registered = discover_models()

    for category, model_ids in registered.items():
        if model_ids:
            logger.info(f'Registered {category} models: {model_ids}')


def build_worker(client: Client, task_queue: str | None = None) -> Worker:
    """Create a worker with every discovered workflow and activity."""
    workflows = discover_workflows()
    activities = discover_activities()

    logger.info(f'Discovered workflows: {[w.__name__ for w in workflows]}')
    logger.info(f'Discovered activities: {[a.__name__ for a in activities]}')

    if not workflows:
        logger.warning('No workflows discovered!')

    if not activities:
        logger.warning('No activities discovered!')

    return Worker(
        client,
        task_queue=task_queue or app_config.TEMPORAL_TASK_QUEUE,
        workflows=workflows,
        activities=activities,
        max_concurrent_activities=app_config.MAX_CONCURRENT_ACTIVITIES,
    )


async def run_worker() -> None:
    """Run the Temporal worker."""
    # Register AI models first (before activity discovery)
    _register_ai_models()

    logger.info(f'Connecting to Temporal at {app_config.TEMPORAL_HOST}...')

    if app_config.WORKFLOW_SECRET_ENABLED:
        if not app_config.WORKFLOW_SECRET_KEY:
            raise ValueError('WORKFLOW_SECRET_ENABLED=True but WORKFLOW_SECRET_KEY is not set!')
        logger.info('Workflow secret authentication ENABLED')
    else:
        logger.info('Workflow secret authentication DISABLED')

    client = await Client.connect(
        app_config.TEMPORAL_HOST,
        namespace=app_config.TEMPORAL_NAMESPACE,
        data_converter=pydantic_data_converter,
    )

    # A/B test variants may run on their own queue
    task_queues = list(dict.fromkeys([app_config.TEMPORAL_TASK_QUEUE, app_config.AB_TEST_TASK_QUEUE]))
    logger.info(f'Connected! Task queues: {task_queues}')

    workers = [build_worker(client, queue) for queue in task_queues]

    shutdown_event = asyncio.Event()

    def signal_handler(_sig: int, _frame: Any) -> None:
        logger.info('Shutting down...')
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info(f'Starting worker (max {app_config.MAX_CONCURRENT_ACTIVITIES} concurrent activities)...')

    async with AsyncExitStack() as stack:
        for worker in workers:
            await stack.enter_async_context(worker)
        logger.info('Worker started!')
        await shutdown_event.wait()


def main() -> None:
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == '__main__':
    main()
