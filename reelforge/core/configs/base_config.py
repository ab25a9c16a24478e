from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base settings class shared by all config objects.

    Values are read from the environment first, then from a local `.env` file.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True,
    )

    @staticmethod
    def _parse_list(value: Any) -> Any:
        """Accept comma separated strings for list fields (e.g. LOG_HANDLERS=stream,file)."""
        if isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        return value
