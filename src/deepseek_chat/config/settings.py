"""
Configuration settings for DeepSeek Chat.

This module provides configuration management using Pydantic settings
with support for environment variables and .env files.
"""

from typing import Optional, Dict, Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from deepseek_chat.core.client.completion_client import (
    DEFAULT_API_URL,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MODEL,
    DEFAULT_READ_TIMEOUT,
)
from deepseek_chat.core.client.messages import DEFAULT_LOCALE, SUPPORTED_LOCALES


class DeepSeekSettings(BaseSettings):
    """
    Main configuration settings for DeepSeek Chat.

    Settings are loaded from multiple sources in order of preference:
    1. Environment variables (prefixed with DEEPSEEK_)
    2. .env file in the working directory
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="DEEPSEEK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_key: Optional[str] = Field(
        default=None,
        description="DeepSeek API key"
    )

    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="Chat completions endpoint"
    )

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Model identifier sent with every request"
    )

    # Transport Configuration
    connect_timeout: float = Field(
        default=DEFAULT_CONNECT_TIMEOUT,
        description="Connect timeout per attempt in seconds",
        gt=0
    )

    read_timeout: float = Field(
        default=DEFAULT_READ_TIMEOUT,
        description="Read timeout per attempt in seconds",
        gt=0
    )

    # Retry Configuration
    max_attempts: int = Field(
        default=3,
        description="Maximum number of attempts per message",
        ge=1,
        le=10
    )

    server_backoff_ms: int = Field(
        default=2000,
        description="Backoff unit after server and transport errors",
        ge=0
    )

    timeout_backoff_ms: int = Field(
        default=3000,
        description="Backoff unit after timeouts",
        ge=0
    )

    # UI Configuration
    locale: str = Field(
        default=DEFAULT_LOCALE,
        description="Language of user-facing messages"
    )

    # Logging Configuration
    log_level: str = Field(
        default="WARNING",
        description="Logging level"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate endpoint scheme."""
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"Invalid API URL '{v}'. Must start with https:// or http://")
        return v

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, v: str) -> str:
        """Validate locale name."""
        if v not in SUPPORTED_LOCALES:
            raise ValueError(f"Invalid locale '{v}'. Valid locales: {', '.join(sorted(SUPPORTED_LOCALES))}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Valid levels: {', '.join(sorted(valid_levels))}")
        return v_upper

    @property
    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.api_key and self.api_key.strip())

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary, excluding sensitive data."""
        data = self.model_dump()
        # Mask sensitive data
        if data.get("api_key"):
            data["api_key"] = "***masked***"
        return data


def get_settings() -> DeepSeekSettings:
    """Get the current DeepSeek Chat settings."""
    return DeepSeekSettings()
