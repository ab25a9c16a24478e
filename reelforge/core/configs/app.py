from typing import Annotated, Literal

from pydantic import BeforeValidator, computed_field

from reelforge.core.configs.base_config import BaseConfig


class AppConfig(BaseConfig):
    ENVIRONMENT: Literal['local', 'staging', 'production', 'testing'] = 'local'
    PROJECT_NAME: str = 'Reelforge'

    # Logging
    LOG_LEVEL: str = 'DEBUG'
    LOG_HANDLERS: Annotated[list[Literal['stream', 'file']] | str, BeforeValidator(BaseConfig._parse_list)] = ['stream']

    # Generation Services
    REPLICATE_API_KEY: str | None = None

    # Replicate API Token (alias for REPLICATE_API_KEY)
    REPLICATE_API_TOKEN: str | None = None

    @computed_field  # type: ignore[misc]
    @property
    def replicate_token(self) -> str | None:
        return self.REPLICATE_API_TOKEN or self.REPLICATE_API_KEY

    # Local directory generated media is written to (one fresh file per activity attempt)
    OUTPUT_DIR: str = 'generated'

    # Social platform gateway (upload, metrics, account health, proxies)
    PLATFORM_GATEWAY_URL: str = 'http://localhost:8080/api'
    PLATFORM_GATEWAY_API_KEY: str | None = None
    PLATFORM_GATEWAY_TIMEOUT: float = 60.0

    # Temporal
    TEMPORAL_HOST: str = 'localhost:7233'
    TEMPORAL_NAMESPACE: str = 'default'
    TEMPORAL_TASK_QUEUE: str = 'generation-queue'
    AB_TEST_TASK_QUEUE: str = 'generation-queue'

    # Ceiling on concurrently running activity tasks per worker
    MAX_CONCURRENT_ACTIVITIES: int = 20

    # Workflow Secret Authentication
    # When enabled, all workflow inputs must include a valid secret_key
    # Hack because temporal doesn't support authentication with self hosted servers
    WORKFLOW_SECRET_ENABLED: bool = False
    WORKFLOW_SECRET_KEY: str | None = None  # Required when WORKFLOW_SECRET_ENABLED=True


app_config = AppConfig()
