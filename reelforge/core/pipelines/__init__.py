from reelforge.core.pipelines.nodes import (
    CharacterImageNode,
    EnhancementNode,
    NodeKind,
    PipelineConfig,
    PipelineNode,
    VideoGenerationNode,
    apply_variant,
)

__all__ = [
    'CharacterImageNode',
    'EnhancementNode',
    'NodeKind',
    'PipelineConfig',
    'PipelineNode',
    'VideoGenerationNode',
    'apply_variant',
]
