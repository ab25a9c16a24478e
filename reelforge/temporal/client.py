"""Temporal Client - for starting, signalling and querying workflows.

Example usage:
    from reelforge.temporal.client import start_workflow, query_workflow, signal_workflow
    from reelforge.temporal.schemas import SingleVideoInput
    from reelforge.temporal.workflows import SingleVideoWorkflow

    handle = await start_workflow(
        SingleVideoWorkflow.run,
        SingleVideoInput(character_prompt='...', video_prompt='...'),
    )
    await signal_workflow(handle.id, 'pause')
    progress = await query_workflow(handle.id, 'progress')
    await signal_workflow(handle.id, 'resume')
    result = await handle.result()

Authentication:
    When WORKFLOW_SECRET_ENABLED=True (production), include secret_key in workflow input:
    result = await execute_workflow(
        SingleVideoWorkflow.run,
        SingleVideoInput(secret_key='your-secret-key', ...),
    )
"""

import logging
import uuid
from typing import Any

from temporalio.client import Client, WorkflowHandle
from temporalio.contrib.pydantic import pydantic_data_converter

from reelforge.core.configs import app_config

logger = logging.getLogger('temporal.client')


class _ClientHolder:
    """Holder for singleton Temporal client instance."""

    instance: Client | None = None


async def get_temporal_client() -> Client:
    """Get or create the Temporal client.

    Uses a singleton pattern to reuse connections.
    """
    if _ClientHolder.instance is None:
        logger.info('Connecting to Temporal at %s...', app_config.TEMPORAL_HOST)

        try:
            _ClientHolder.instance = await Client.connect(
                app_config.TEMPORAL_HOST,
                namespace=app_config.TEMPORAL_NAMESPACE,
                data_converter=pydantic_data_converter,
            )

            logger.info('Connected to Temporal successfully (namespace: %s)', app_config.TEMPORAL_NAMESPACE)
        except Exception:
            logger.exception('Failed to connect to Temporal at %s', app_config.TEMPORAL_HOST)
            raise

    return _ClientHolder.instance


async def start_workflow(
    workflow: Any,
    arg: Any,
    *,
    id: str | None = None,
    task_queue: str | None = None,
) -> WorkflowHandle:
    """Start a workflow and return a handle.

    Args:
        workflow: The workflow run method (e.g., SingleVideoWorkflow.run)
        arg: The workflow input (must include secret_key when auth enabled)
        id: Optional workflow ID (auto-generated if not provided)
        task_queue: Optional task queue (uses default if not provided)
    """
    client = await get_temporal_client()

    workflow_id = id or f'workflow-{uuid.uuid4().hex[:12]}'
    queue = task_queue or app_config.TEMPORAL_TASK_QUEUE

    return await client.start_workflow(
        workflow,
        arg,
        id=workflow_id,
        task_queue=queue,
    )


async def execute_workflow(
    workflow: Any,
    arg: Any,
    *,
    id: str | None = None,
    task_queue: str | None = None,
) -> Any:
    """Start a workflow and wait for its result."""
    handle = await start_workflow(workflow, arg, id=id, task_queue=task_queue)
    return await handle.result()


async def get_workflow_handle(workflow_id: str) -> WorkflowHandle:
    """Get a handle to an existing workflow by ID."""
    client = await get_temporal_client()
    return client.get_workflow_handle(workflow_id)


async def cancel_workflow(workflow_id: str) -> None:
    """Request engine-level cancellation of a running workflow.

    Pipelines also accept a cooperative `cancel` signal (see signal_workflow),
    which lets in-flight generations finish.
    """
    handle = await get_workflow_handle(workflow_id)
    await handle.cancel()


async def signal_workflow(workflow_id: str, signal_name: str, arg: Any = None) -> None:
    """Send a signal ('pause', 'resume', 'cancel', 'scale') to a workflow.

    Args:
        workflow_id: The workflow ID
        signal_name: Name of the signal
        arg: Optional signal argument (e.g. the factor for 'scale')
    """
    handle = await get_workflow_handle(workflow_id)
    if arg is None:
        await handle.signal(signal_name)
    else:
        await handle.signal(signal_name, arg)


async def query_workflow(workflow_id: str, query_name: str) -> Any:
    """Query a workflow for its current state.

    Args:
        workflow_id: The workflow ID
        query_name: Name of the query ('progress', 'totalCost', 'status',
            'getMetrics', 'getStatus')

    Returns:
        The query result
    """
    handle = await get_workflow_handle(workflow_id)
    return await handle.query(query_name)
