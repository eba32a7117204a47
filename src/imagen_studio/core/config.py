"""Configuration management for Imagen Studio.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the IMAGEN_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (IMAGEN_* prefix)
2. .env file in the project root
3. Default values defined in ImagenStudioConfig

The Gemini API key is the one exception to the prefix rule: it is also read
from the conventional ``GEMINI_API_KEY`` and ``API_KEY`` variables.

Example .env file:
    GEMINI_API_KEY=...
    IMAGEN_DEFAULT_MODEL=gemini-3-pro-image-preview
    IMAGEN_MAX_QUEUE_SIZE=5
    IMAGEN_DEBOUNCE_MS=500

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

Usage Example
-------------
    from imagen_studio.core.config import config

    print(config.max_queue_size)
    print(config.retry_initial_delay)
"""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from imagen_studio.core.catalog import DEBOUNCE_TIME_MS, DEFAULT_MODEL, MAX_QUEUE_SIZE, ModelType


class ImagenStudioConfig(BaseSettings):
    """Main configuration for Imagen Studio.

    Attributes
    ----------
    Provider Settings:
        gemini_api_key : str | None
            API key for the Gemini API.  The provider client is created lazily,
            so the service starts without one and fails per request instead.
        default_model : ModelType
            Model substituted when a submission does not name one
        pro_image_size : str
            Output-resolution hint sent to models that support it

    Admission Settings:
        max_queue_size : int
            Maximum number of pending plus in-flight requests
        debounce_ms : int
            Minimum interval between two accepted submissions
        prompt_min_length : int
        prompt_max_length : int

    Retry Settings:
        max_retries : int
            Additional attempts after the first failed provider call
        retry_initial_delay_ms : int
            Delay before the first retry; later retries multiply it
        retry_backoff : float
            Multiplier applied to the delay after each retry

    Server Settings:
        server_host : str
        server_port : int
        log_level : str
        auth_delay_ms : int
            Simulated latency of the demo identity provider
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IMAGEN_",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider settings
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "gemini_api_key", "IMAGEN_GEMINI_API_KEY", "GEMINI_API_KEY", "API_KEY"
        ),
        description="API key for the Gemini API",
    )
    default_model: ModelType = Field(
        default=DEFAULT_MODEL,
        description="Model used when a request does not specify one",
    )
    pro_image_size: str = Field(
        default="1K",
        description="Resolution hint for models that accept one",
    )

    # Admission settings
    max_queue_size: int = Field(default=MAX_QUEUE_SIZE, ge=1, le=100)
    debounce_ms: int = Field(
        default=DEBOUNCE_TIME_MS,
        ge=0,
        description="Minimum milliseconds between accepted submissions",
    )
    prompt_min_length: int = Field(default=3, ge=1)
    prompt_max_length: int = Field(default=1000, ge=1)

    # Retry settings
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_initial_delay_ms: int = Field(default=1000, ge=0)
    retry_backoff: float = Field(default=2.0, ge=1.0)

    # Demo identity provider
    auth_delay_ms: int = Field(default=1500, ge=0)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=3000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def retry_initial_delay(self) -> float:
        return self.retry_initial_delay_ms / 1000

    @property
    def auth_delay(self) -> float:
        return self.auth_delay_ms / 1000


# Global configuration instance
config = ImagenStudioConfig()
