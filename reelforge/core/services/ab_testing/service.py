"""A/B testing of model substitutions.

Runs the single video pipeline once per variant, each with one node kind
switched to a different model, and ranks the results by speed, cost and a
weighted overall score.

Example:
    service = ABTestingService()
    results = await service.run_ab_test(
        PipelineConfig(character_prompt='...', video_prompt='...'),
        [
            ModelVariant(id='veo3-fast', name='Veo 3 Fast', node_kind=NodeKind.VIDEO_GENERATION, model='veo-3-fast'),
            ModelVariant(id='kling', name='Kling 2.1', node_kind=NodeKind.VIDEO_GENERATION, model='kling-v2.1'),
        ],
        ABTestOptions(test_name='Video model shootout'),
    )
    print(render_comparison_table(results.comparison_table))
"""

import uuid
from datetime import datetime, timezone
from pathlib import Path

from temporalio.client import Client, WorkflowHandle

from reelforge.core.configs import app_config
from reelforge.core.deps import logger
from reelforge.core.pipelines import PipelineConfig, apply_variant
from reelforge.core.services.ab_testing.schemas import (
    ABTestOptions,
    ABTestResults,
    ABTestVariantResult,
    ModelVariant,
)
from reelforge.core.services.ab_testing.scoring import (
    QualityScorer,
    build_comparison,
    build_comparison_table,
    default_quality_scorer,
    variant_metrics,
)
from reelforge.temporal.schemas import PipelineResult
from reelforge.temporal.workflows import SingleVideoWorkflow


def _result_outputs(result: PipelineResult) -> dict[str, str]:
    outputs = {
        'character_image_path': result.character_image_path,
        'video_path': result.video_path,
        'enhanced_video_path': result.enhanced_video_path,
    }
    return {key: value for key, value in outputs.items() if value}


class ABTestingService:
    """Launches and compares variant executions of SingleVideoWorkflow."""

    def __init__(
        self,
        client: Client | None = None,
        quality_scorer: QualityScorer = default_quality_scorer,
    ):
        self._client = client
        self._quality_scorer = quality_scorer

    async def _get_client(self) -> Client:
        if self._client is None:
            from reelforge.temporal.client import get_temporal_client

            self._client = await get_temporal_client()
        return self._client

    async def run_ab_test(
        self,
        base_config: PipelineConfig,
        variants: list[ModelVariant],
        options: ABTestOptions | None = None,
    ) -> ABTestResults:
        """Run every variant and compare them.

        All executions are started before any is awaited, so they run
        concurrently on the worker. A variant that fails (raises or returns
        success=False) is kept in the results with zero metrics.

        Raises:
            ValueError: If no variants are given or variant ids repeat
            ABTestError: If every variant failed
        """
        options = options or ABTestOptions()
        if not variants:
            raise ValueError('At least one variant is required')
        ids = [v.id for v in variants]
        if len(set(ids)) != len(ids):
            raise ValueError(f'Variant ids must be unique: {ids}')

        test_id = options.test_id or f'ab-test-{uuid.uuid4().hex[:12]}'
        task_queue = options.task_queue or app_config.AB_TEST_TASK_QUEUE
        log = logger.bind(test_id=test_id, test_name=options.test_name)
        client = await self._get_client()
        start_time = datetime.now(timezone.utc)

        log.info('Starting A/B test', variants=len(variants), task_queue=task_queue)

        # Start everything first
        launched: list[tuple[ModelVariant, str, WorkflowHandle | None, str | None]] = []
        for variant in variants:
            workflow_id = f'{test_id}-{variant.id}'
            try:
                config = apply_variant(base_config, variant.node_kind, variant.model, variant.param_overrides)
                handle = await client.start_workflow(
                    SingleVideoWorkflow.run,
                    config.to_workflow_input(secret_key=options.secret_key),
                    id=workflow_id,
                    task_queue=task_queue,
                )
            except Exception as e:
                log.error('Failed to start variant', variant=variant.id, error=str(e))
                launched.append((variant, workflow_id, None, str(e)))
                continue
            log.info('Variant started', variant=variant.id, model=variant.model, workflow_id=workflow_id)
            launched.append((variant, workflow_id, handle, None))

        # Then wait for each one independently
        results: list[ABTestVariantResult] = []
        for variant, workflow_id, handle, start_error in launched:
            if handle is None:
                results.append(ABTestVariantResult(variant=variant, workflow_id=workflow_id, error=start_error))
                continue
            results.append(await self._collect(handle, variant, workflow_id))

        end_time = datetime.now(timezone.utc)

        comparison = build_comparison(results, options.weights, self._quality_scorer)
        table = build_comparison_table(results, self._quality_scorer)

        log.info(
            'A/B test complete',
            succeeded=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success),
            winner=comparison.winner.id,
            fastest=comparison.fastest.id,
            cheapest=comparison.cheapest.id,
        )

        return ABTestResults(
            test_id=test_id,
            test_name=options.test_name,
            start_time=start_time,
            end_time=end_time,
            total_duration=(end_time - start_time).total_seconds(),
            base_config=base_config,
            variants=results,
            comparison=comparison,
            comparison_table=table,
        )

    async def _collect(self, handle: WorkflowHandle, variant: ModelVariant, workflow_id: str) -> ABTestVariantResult:
        try:
            result: PipelineResult = await handle.result()
        except Exception as e:
            logger.error('Variant execution failed', variant=variant.id, workflow_id=workflow_id, error=str(e))
            return ABTestVariantResult(variant=variant, workflow_id=workflow_id, error=str(e))

        if not result.success:
            logger.warning('Variant pipeline failed', variant=variant.id, workflow_id=workflow_id, error=result.error)

        return ABTestVariantResult(
            variant=variant,
            workflow_id=workflow_id,
            result=result,
            metrics=variant_metrics(result),
            outputs=_result_outputs(result),
            error=result.error,
        )

    @staticmethod
    def export_results(results: ABTestResults, filepath: str | Path) -> Path:
        """Write results as JSON and return the path."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(results.model_dump_json(indent=2))
        logger.info('A/B test results exported', path=str(path))
        return path
