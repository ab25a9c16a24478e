"""Base types for AI model definitions."""

from abc import abstractmethod
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class Provider(str, Enum):
    """Supported AI providers."""

    REPLICATE = 'replicate'


class ModelCategory(str, Enum):
    """Category of the model. Maps one-to-one onto pipeline stages."""

    IMAGE = 'image'
    VIDEO = 'video'
    ENHANCE = 'enhance'


class ModelCapability(str, Enum):
    """Capabilities a model can have."""

    TEXT_TO_IMAGE = 'text_to_image'
    IMAGE_TO_IMAGE = 'image_to_image'
    TEXT_TO_VIDEO = 'text_to_video'
    IMAGE_TO_VIDEO = 'image_to_video'
    VIDEO_UPSCALING = 'video_upscaling'


class ProviderConfig(BaseModel):
    """Provider-specific configuration for a model."""

    provider: Provider
    model_id: str = Field(description='Provider-specific model identifier')
    version: str | None = Field(None, description='Model version (if applicable)')

    def get_full_model_string(self) -> str:
        """Get the full model string for API calls."""
        if self.version:
            return f'{self.model_id}:{self.version}'
        return self.model_id


class ModelInput(BaseModel):
    """Base class for model input schemas.

    Each model defines its own input class inheriting from this,
    with a conversion method per supported provider.
    """

    @abstractmethod
    def to_replicate(self) -> dict[str, Any]:
        """Convert to Replicate API input format."""
        raise NotImplementedError('Subclass must implement to_replicate()')

    def billable_seconds(self) -> float:
        """Seconds of output the provider bills for. Zero for per-run pricing."""
        return 0.0

    def to_provider(self, provider: Provider) -> dict[str, Any]:
        """Convert to the specified provider's input format."""
        converters = {
            Provider.REPLICATE: self.to_replicate,
        }
        converter = converters.get(provider)
        if not converter:
            raise ValueError(f'Unknown provider: {provider}')
        return converter()


class ModelDefinition(BaseModel):
    """Definition of an AI model.

    Contains metadata about a model, its provider configurations
    and the pricing used to report activity cost.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Identification
    id: str = Field(description='Unique model ID (e.g., "veo-3-fast")')
    name: str = Field(description='Human-readable model name')

    # Categorization
    category: ModelCategory = Field(description='Model category')
    capabilities: list[ModelCapability] = Field(default_factory=list)

    # Metadata
    description: str = Field('', description='Model description')
    author: str = Field('', description='Model author/organization')

    # Provider configurations
    provider_configs: dict[Provider, ProviderConfig] = Field(
        default_factory=dict,
        description='Provider-specific configurations',
    )

    # Pricing (USD)
    cost_per_run: float = Field(0.0, ge=0, description='Flat cost per prediction')
    cost_per_second: float = Field(0.0, ge=0, description='Cost per billable second of output')

    # Performance hints
    avg_generation_time_seconds: float | None = Field(None)

    # Input schema class
    input_class: ClassVar[type[ModelInput]]

    @property
    def providers(self) -> list[Provider]:
        """Get list of supported providers."""
        return list(self.provider_configs.keys())

    def supports_provider(self, provider: Provider) -> bool:
        """Check if this model supports a provider."""
        return provider in self.provider_configs

    def get_provider_config(self, provider: Provider) -> ProviderConfig:
        """Get configuration for a specific provider."""
        if provider not in self.provider_configs:
            raise ValueError(f'Model {self.id} does not support provider {provider}')
        return self.provider_configs[provider]

    def get_input_schema(self) -> dict[str, Any]:
        """Get the JSON schema for this model's inputs."""
        return self.input_class.model_json_schema()

    def validate_input(self, input_data: dict[str, Any]) -> ModelInput:
        """Validate and parse input data against this model's schema."""
        return self.input_class.model_validate(input_data)

    def estimate_cost(self, typed_input: ModelInput, runs: int = 1) -> float:
        """Cost of `runs` predictions with the given input."""
        per_run = self.cost_per_run + self.cost_per_second * typed_input.billable_seconds()
        return round(per_run * runs, 6)
