"""
Configuration management for the EnergyGrid Aggregator.

Supports configuration via environment variables and .env files.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AggregatorConfig(BaseSettings):
    """
    Configuration settings for the EnergyGrid Aggregator.

    All settings can be configured via environment variables with the AGGREGATOR_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="AGGREGATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Telemetry endpoint settings
    api_host: str = Field(
        default="localhost",
        description="Telemetry API host"
    )
    api_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Telemetry API port"
    )
    api_path: str = Field(
        default="/device/real/query",
        description="Telemetry query path (part of the signed payload)"
    )
    api_token: str = Field(
        default="interview_token_123",
        min_length=1,
        description="Shared secret used to sign requests"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for a single HTTP attempt"
    )

    # Population and batching
    device_count: int = Field(
        default=500,
        ge=0,
        description="Number of serial numbers to generate for a run"
    )
    batch_size: int = Field(
        default=10,
        ge=1,
        le=10,
        description="Number of devices per request (never above max_batch_size)"
    )

    # Throttling
    rate_limit_ms: int = Field(
        default=1000,
        ge=0,
        description="Pause between consecutive batch dispatches"
    )
    rate_limit_tolerance_ms: int = Field(
        default=50,
        ge=0,
        description="Jitter tolerance applied by the mock API rate limiter"
    )
    max_batch_size: int = Field(
        default=10,
        ge=1,
        le=10,
        description="Largest batch the mock API accepts"
    )

    # Retry settings
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Additional attempts for rate-limited or network failures"
    )
    retry_delay_ms: int = Field(
        default=2000,
        ge=0,
        description="Fixed delay before each retry"
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Bind host for the combined API server"
    )
    server_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Bind port for the combined API server"
    )

    # Logging settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept level names in any case."""
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_batch_size(self) -> "AggregatorConfig":
        """Batches must fit what the telemetry API accepts."""
        if self.batch_size > self.max_batch_size:
            raise ValueError(
                f"batch_size ({self.batch_size}) exceeds max_batch_size ({self.max_batch_size})"
            )
        return self

    @property
    def base_url(self) -> str:
        """Base URL of the telemetry API."""
        return f"http://{self.api_host}:{self.api_port}"

    @property
    def rate_limit_seconds(self) -> float:
        return self.rate_limit_ms / 1000

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000

    @property
    def server_min_interval_ms(self) -> int:
        """Minimum gap the mock API enforces between admitted requests."""
        return max(self.rate_limit_ms - self.rate_limit_tolerance_ms, 0)


# Global config instance
_config: Optional[AggregatorConfig] = None


def get_config() -> AggregatorConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = AggregatorConfig()
    return _config


def set_config(config: AggregatorConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
