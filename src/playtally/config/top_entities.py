"""Configuration for the "top entities" statistics API."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, env_str, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

DEFAULT_TOP_API_URL = "https://spotify-api.tordar.no/spotify/top"
DEFAULT_START = "2010-05-02T05:22:01.000Z"
DEFAULT_END = "2025-09-16T12:33:53.259Z"
DEFAULT_PAGE_SIZE = 20
DEFAULT_TOTAL_CALLS = 50
TOP_API_TIMEOUT_SECONDS = 30.0
# Browser-like user agent; the API rejects default client identifiers.
_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"


@dataclass(frozen=True, slots=True)
class TopEntitiesConfig:
    """Holds the statistics API endpoint, credentials and paging window."""

    token: str
    resilience: ResilienceConfig
    start: str = DEFAULT_START
    end: str = DEFAULT_END
    page_size: int = DEFAULT_PAGE_SIZE
    total_calls: int = DEFAULT_TOTAL_CALLS


def default_top_entities_resilience(base_url: str = DEFAULT_TOP_API_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="top-entities",
        base_url=base_url,
        timeout_seconds=TOP_API_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        cache=CacheConfig(backend="memory"),
        default_headers={"User-Agent": _USER_AGENT},
    )


def get_top_entities_config(*, resilience: ResilienceConfig | None = None) -> TopEntitiesConfig:
    values = require_env_vars(("TOP_API_TOKEN",))
    base_url = env_str("TOP_API_URL", DEFAULT_TOP_API_URL)
    return TopEntitiesConfig(
        token=values["TOP_API_TOKEN"],
        resilience=resilience or default_top_entities_resilience(base_url),
        start=env_str("TOP_API_START", DEFAULT_START),
        end=env_str("TOP_API_END", DEFAULT_END),
        page_size=env_int("TOP_API_BATCH_SIZE", DEFAULT_PAGE_SIZE),
        total_calls=env_int("TOP_API_TOTAL_CALLS", DEFAULT_TOTAL_CALLS),
    )
