"""Tests for the A/B testing service with a mocked Temporal client."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from reelforge.core.pipelines import CharacterImageNode, NodeKind, PipelineConfig, VideoGenerationNode
from reelforge.core.services.ab_testing import ABTestError, ABTestingService, ABTestOptions, ModelVariant
from reelforge.temporal.schemas import PipelineResult, StageMetrics


def _pipeline_result(cost: float, time: float) -> PipelineResult:
    return PipelineResult(
        success=True,
        video_path='generated/videos/v.mp4',
        total_cost=cost,
        total_time=time,
        stages={'character': StageMetrics(time=time, cost=cost)},
    )


def _handle(result=None, error: Exception | None = None) -> MagicMock:
    handle = MagicMock()
    handle.result = AsyncMock(return_value=result, side_effect=error)
    return handle


@pytest.fixture
def base_config() -> PipelineConfig:
    return PipelineConfig(
        character_prompt='A smiling barista',
        video_prompt='Pours latte art',
        nodes=[CharacterImageNode(), VideoGenerationNode()],
    )


@pytest.fixture
def variants() -> list[ModelVariant]:
    return [
        ModelVariant(id='veo', name='Veo 3 Fast', node_kind=NodeKind.VIDEO_GENERATION, model='veo-3-fast'),
        ModelVariant(id='kling', name='Kling', node_kind=NodeKind.VIDEO_GENERATION, model='kling-v2.1'),
        ModelVariant(id='broken', name='Broken', node_kind=NodeKind.VIDEO_GENERATION, model='veo-3'),
    ]


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.start_workflow = AsyncMock(
        side_effect=[
            _handle(_pipeline_result(1.2, 90.0)),
            _handle(_pipeline_result(0.5, 120.0)),
            _handle(error=RuntimeError('worker crashed')),
        ]
    )
    return client


class TestABTestingService:
    async def test_failed_variant_is_kept_with_zero_metrics(self, client, base_config, variants):
        service = ABTestingService(client=client)

        results = await service.run_ab_test(
            base_config,
            variants,
            ABTestOptions(test_id='ab-test-1', test_name='Video models', task_queue='ab-queue'),
        )

        assert [r.variant.id for r in results.variants] == ['veo', 'kling', 'broken']
        assert [r.success for r in results.variants] == [True, True, False]
        assert results.variants[2].metrics.total_cost == 0.0
        assert results.variants[2].error
        assert len(results.comparison_table) == 3

        assert results.comparison.fastest.id == 'veo'
        assert results.comparison.cheapest.id == 'kling'
        assert results.variants[0].outputs == {'video_path': 'generated/videos/v.mp4'}
        assert results.total_duration >= 0

    async def test_each_variant_gets_its_own_execution(self, client, base_config, variants):
        await ABTestingService(client=client).run_ab_test(
            base_config,
            variants,
            ABTestOptions(test_id='ab-test-1', task_queue='ab-queue'),
        )

        calls = client.start_workflow.await_args_list
        assert [call.kwargs['id'] for call in calls] == ['ab-test-1-veo', 'ab-test-1-kling', 'ab-test-1-broken']
        assert {call.kwargs['task_queue'] for call in calls} == {'ab-queue'}
        assert [call.args[1].video_model for call in calls] == ['veo-3-fast', 'kling-v2.1', 'veo-3']
        # The base config is shared and never mutated
        assert base_config.nodes[1].model == 'veo-3-fast'

    async def test_unsuccessful_pipeline_counts_as_failure(self, base_config, variants):
        client = MagicMock()
        client.start_workflow = AsyncMock(
            side_effect=[
                _handle(PipelineResult(success=False, error='Workflow cancelled by user')),
                _handle(_pipeline_result(0.5, 120.0)),
            ]
        )

        results = await ABTestingService(client=client).run_ab_test(base_config, variants[:2])

        assert results.variants[0].success is False
        assert results.variants[0].error == 'Workflow cancelled by user'
        assert results.comparison.winner.id == 'kling'
        assert results.test_id.startswith('ab-test-')

    async def test_all_failed_raises(self, base_config, variants):
        client = MagicMock()
        client.start_workflow = AsyncMock(side_effect=RuntimeError('temporal unavailable'))

        with pytest.raises(ABTestError):
            await ABTestingService(client=client).run_ab_test(base_config, variants)

    async def test_duplicate_variant_ids_rejected(self, client, base_config, variants):
        with pytest.raises(ValueError, match='unique'):
            await ABTestingService(client=client).run_ab_test(base_config, [variants[0], variants[0]])

    async def test_export_results(self, client, base_config, variants, tmp_path):
        results = await ABTestingService(client=client).run_ab_test(base_config, variants)

        path = ABTestingService.export_results(results, tmp_path / 'reports' / 'ab.json')

        data = json.loads(path.read_text())
        assert data['test_id'] == results.test_id
        assert len(data['variants']) == 3
        assert data['comparison']['cheapest']['id'] == 'kling'
