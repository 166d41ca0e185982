# config.py
"""Configuration helpers for the SectionLens viewer."""

from __future__ import annotations

import logging
from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Load viewer configuration from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SECTION_LENS_",
        populate_by_name=True,
    )

    api_base_url: AnyHttpUrl = Field(
        default="http://localhost:8000",
        alias="API_BASE_URL",
        description="Base URL of the document store serving metadata and text.",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        alias="API_TIMEOUT_SECONDS",
        description="HTTP timeout for document store requests in seconds.",
    )
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Python logging level for the viewer and API.",
    )
    minimap_height: int = Field(
        default=20,
        ge=0,
        alias="MINIMAP_HEIGHT",
        description="Rows in the terminal minimap track; 0 hides it.",
    )
    jump_context_lines: int = Field(
        default=3,
        ge=0,
        alias="JUMP_CONTEXT_LINES",
        description="Lines shown above and below a match when jumping to it.",
    )

    @property
    def logging_level(self) -> int:
        """Resolve the configured log level to a logging constant."""

        level = getattr(logging, self.log_level.upper(), None)
        if isinstance(level, int):
            return level
        return logging.INFO
