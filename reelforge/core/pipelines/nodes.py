"""Typed pipeline configuration.

A pipeline is an ordered list of nodes. Each node is a tagged union member
keyed by `kind`, so a config round-trips through JSON without losing which
stage a node drives. A/B variants swap the model of every node of one kind.
"""

from enum import Enum
from typing import Annotated, Any, Literal, assert_never

from pydantic import BaseModel, Field

from reelforge.core.deps import logger
from reelforge.temporal.schemas import (
    DEFAULT_ENHANCE_MODEL,
    DEFAULT_IMAGE_MODEL,
    VIDEO_TIER_MODELS,
    AspectRatioValue,
    SingleVideoInput,
    VideoDuration,
)


class NodeKind(str, Enum):
    """Pipeline stages a node can drive."""

    CHARACTER_IMAGE = 'character_image'
    VIDEO_GENERATION = 'video_generation'
    ENHANCEMENT = 'enhancement'


class CharacterImageNode(BaseModel):
    kind: Literal[NodeKind.CHARACTER_IMAGE] = NodeKind.CHARACTER_IMAGE
    model: str = DEFAULT_IMAGE_MODEL
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    num_images: int = Field(1, ge=1, le=4)
    params: dict[str, Any] = Field(default_factory=dict)


class VideoGenerationNode(BaseModel):
    kind: Literal[NodeKind.VIDEO_GENERATION] = NodeKind.VIDEO_GENERATION
    model: str = VIDEO_TIER_MODELS['fast']
    params: dict[str, Any] = Field(default_factory=dict)


class EnhancementNode(BaseModel):
    kind: Literal[NodeKind.ENHANCEMENT] = NodeKind.ENHANCEMENT
    model: str = DEFAULT_ENHANCE_MODEL
    params: dict[str, Any] = Field(default_factory=dict)


PipelineNode = Annotated[
    CharacterImageNode | VideoGenerationNode | EnhancementNode,
    Field(discriminator='kind'),
]


class PipelineConfig(BaseModel):
    """A single video pipeline described as nodes plus shared prompts."""

    name: str = 'pipeline'
    character_prompt: str = Field(..., min_length=1)
    video_prompt: str = Field(..., min_length=1)
    duration: VideoDuration = 8
    aspect_ratio: AspectRatioValue = '16:9'
    nodes: list[PipelineNode] = Field(
        default_factory=lambda: [CharacterImageNode(), VideoGenerationNode()],
    )

    def nodes_of(self, kind: NodeKind) -> list[PipelineNode]:
        return [node for node in self.nodes if node.kind == kind]

    def to_workflow_input(self, secret_key: str | None = None) -> SingleVideoInput:
        """Compile the node list into the single video workflow input.

        The first node of each kind wins. A config without a video node
        cannot be compiled.
        """
        character = next(iter(self.nodes_of(NodeKind.CHARACTER_IMAGE)), None) or CharacterImageNode()
        videos = self.nodes_of(NodeKind.VIDEO_GENERATION)
        if not videos:
            raise ValueError(f'Pipeline {self.name!r} has no {NodeKind.VIDEO_GENERATION.value} node')
        video = videos[0]
        enhancements = self.nodes_of(NodeKind.ENHANCEMENT)

        return SingleVideoInput(
            secret_key=secret_key,
            character_prompt=self.character_prompt,
            video_prompt=self.video_prompt,
            temperature=character.temperature,
            num_images=character.num_images,
            duration=self.duration,
            aspect_ratio=self.aspect_ratio,
            image_model=character.model,
            image_model_params=dict(character.params),
            video_model=video.model,
            video_model_params=dict(video.params),
            enhance=bool(enhancements),
            enhance_model=enhancements[0].model if enhancements else DEFAULT_ENHANCE_MODEL,
            enhance_model_params=dict(enhancements[0].params) if enhancements else {},
        )


def _typed_overrides(node: PipelineNode) -> frozenset[str]:
    """Node fields a variant may override directly instead of through `params`."""
    match node:
        case CharacterImageNode():
            return frozenset({'temperature', 'num_images'})
        case VideoGenerationNode() | EnhancementNode():
            return frozenset()
        case _:
            assert_never(node)


def _substitute(node: PipelineNode, model: str, overrides: dict[str, Any]) -> PipelineNode:
    """Switch `node` to `model`.

    Overrides naming a typed field of the node (e.g. `temperature` on a
    character image node) set that field and are validated against it;
    everything else is merged into the model-specific `params`.
    """
    typed_fields = _typed_overrides(node)
    typed = {key: value for key, value in overrides.items() if key in typed_fields}
    params = {key: value for key, value in overrides.items() if key not in typed_fields}

    return type(node).model_validate(
        {**node.model_dump(), **typed, 'model': model, 'params': {**node.params, **params}}
    )


def apply_variant(
    config: PipelineConfig,
    node_kind: NodeKind,
    model: str,
    param_overrides: dict[str, Any] | None = None,
) -> PipelineConfig:
    """Return a copy of `config` with every `node_kind` node switched to `model`.

    The base config is never mutated. When the config has no node of the
    requested kind the copy is returned unchanged.
    """
    variant_config = config.model_copy(deep=True)
    targets = variant_config.nodes_of(node_kind)

    if not targets:
        logger.warning(
            'No pipeline node matches variant kind, config left unchanged',
            pipeline=config.name,
            node_kind=node_kind.value,
            model=model,
        )
        return variant_config

    overrides = dict(param_overrides or {})
    variant_config.nodes = [
        _substitute(node, model, overrides) if node.kind == node_kind else node for node in variant_config.nodes
    ]

    logger.debug('Applied variant', pipeline=config.name, node_kind=node_kind.value, model=model, nodes=len(targets))
    return variant_config
