"""Application configuration helpers."""

from __future__ import annotations

from .consolidation import ConsolidationConfig, get_consolidation_config
from .env import env_float, env_int, env_str, require_env_var, require_env_vars
from .errors import (
    ConfigurationError,
    InvalidConfigurationValueError,
    MissingConfigurationError,
)
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .ollama import OllamaConfig, get_ollama_config
from .spotify import SPOTIFY_RECENTLY_PLAYED_SCOPES, SpotifyConfig, get_spotify_config
from .storage import StorageConfig, get_storage_config
from .top_entities import TopEntitiesConfig, get_top_entities_config

__all__ = [
    "SPOTIFY_RECENTLY_PLAYED_SCOPES",
    "CacheConfig",
    "ConfigurationError",
    "ConsolidationConfig",
    "InvalidConfigurationValueError",
    "MissingConfigurationError",
    "OllamaConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SpotifyConfig",
    "StorageConfig",
    "TopEntitiesConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "env_str",
    "get_consolidation_config",
    "get_ollama_config",
    "get_spotify_config",
    "get_storage_config",
    "get_top_entities_config",
    "require_env_var",
    "require_env_vars",
]
