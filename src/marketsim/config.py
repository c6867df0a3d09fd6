"""Configuration for the marketplace load generator."""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class MarketSimSettings(BaseSettings):
    """Settings for the dispatcher, the transport and the registration API.

    Every field can be overridden from the environment with the
    ``MARKETSIM_`` prefix, e.g. ``MARKETSIM_ACCELERATION=10``.
    """

    # Registration API
    host: str = "0.0.0.0"
    port: int = 3000

    # Seller endpoints (appended to each seller's path prefix)
    order_path: str = "/order"
    feedback_path: str = "/feedback"

    # Transport
    request_timeout_seconds: float = 5.0

    # Scheduling
    acceleration: float = 1.0  # 10.0 = intervals ten times shorter
    start_iteration: int = 0

    # Order generation
    seed: Optional[int] = None
    countries: Optional[list[str]] = None  # None = every known country

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {
        "env_prefix": "MARKETSIM_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("order_path", "feedback_path")
    @classmethod
    def path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"path must start with '/': {value!r}")
        return value

    @field_validator("acceleration", "request_timeout_seconds")
    @classmethod
    def positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("start_iteration")
    @classmethod
    def non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be non-negative")
        return value

    @field_validator("log_level")
    @classmethod
    def upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> MarketSimSettings:
    """Get cached settings instance."""
    return MarketSimSettings()
