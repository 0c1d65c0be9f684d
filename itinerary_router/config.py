"""Centralized configuration using Pydantic Settings.

A single source of truth for upstream credentials, planner tuning
constants, caching and logging. Every section can be overridden via
environment variables:

- ITR_AMAP_API_KEY=... (or the plain AMAP_WEB_KEY variable)
- ITR_PLANNER_WALKING_SPEED_MPS=1.2
- ITR_PLANNER_REQUEST_TIMEOUT_SECONDS=20
- ITR_CACHE_CITY_CODE_TTL_SECONDS=600
- ITR_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AmapConfig(BaseSettings):
    """AMap (Gaode) web service configuration.

    Environment variables prefixed with ITR_AMAP_.
    """

    model_config = SettingsConfigDict(env_prefix="ITR_AMAP_", populate_by_name=True)

    api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("ITR_AMAP_API_KEY", "AMAP_WEB_KEY"),
    )
    domain: str = "restapi.amap.com"
    scheme: str = "https"
    timeout_seconds: int = 10
    user_agent: str = "itinerary-router"
    poi_page_size: int = 10


class PlannerConfig(BaseSettings):
    """Itinerary planning configuration.

    Environment variables prefixed with ITR_PLANNER_.
    """

    model_config = SettingsConfigDict(env_prefix="ITR_PLANNER_")

    walking_speed_mps: float = 1.3
    request_timeout_seconds: float = 30.0
    max_workers: int = 16
    nn_only_max_points: int = 3
    split_iterations: int = 8
    two_opt_max_passes: int = 50
    two_opt_epsilon_m: float = 1e-6
    default_origin_name: str = "起点"


class CacheConfig(BaseSettings):
    """Cache configuration.

    Environment variables prefixed with ITR_CACHE_.
    """

    model_config = SettingsConfigDict(env_prefix="ITR_CACHE_")

    city_code_ttl_seconds: Optional[float] = 3600.0
    max_size: Optional[int] = 256


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with ITR_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="ITR_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.planner.walking_speed_mps)
        print(config.amap.domain)

    Environment variables prefixed with ITR_.
    """

    model_config = SettingsConfigDict(env_prefix="ITR_")

    amap: AmapConfig = Field(default_factory=AmapConfig)
    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Apply the logging level and format to the root logger."""
    config = config or get_config().observability
    logging.basicConfig(level=config.level.upper(), format=config.format)
