"""Configuration management for multimime."""

import logging
from typing import Dict, List, Union

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "multimime"
    SERVICE_VERSION: str = "0.1.1"
    LOG_LEVEL: str = "INFO"

    # Extension -> one or many MIME types, as JSON, e.g.
    # ADDITIONAL_MIMES='{"dwg": ["application/acad", "image/vnd.dwg"]}'
    ADDITIONAL_MIMES: Dict[str, Union[str, List[str]]] = {}

    @property
    def log_level(self) -> int:
        """Resolve LOG_LEVEL to a logging level, defaulting to INFO."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO


# Singleton settings instance
settings = Settings()
