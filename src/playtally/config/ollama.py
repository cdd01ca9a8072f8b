"""Configuration for the local language-model oracle (Ollama)."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_str
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "llama3.1"
FAST_OLLAMA_MODEL = "llama3"
OLLAMA_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True, slots=True)
class OllamaConfig:
    model: str
    resilience: ResilienceConfig
    temperature: float = 0.1
    top_p: float = 0.9


def default_ollama_resilience(base_url: str = DEFAULT_OLLAMA_URL) -> ResilienceConfig:
    # Completions are not cacheable and a busy local model should fail fast into
    # the fallback decision rather than retry for minutes.
    return ResilienceConfig(
        name="ollama",
        base_url=base_url,
        timeout_seconds=OLLAMA_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=0),
        cache=None,
    )


def get_ollama_config(
    *,
    model: str | None = None,
    base_url: str | None = None,
) -> OllamaConfig:
    url = base_url or env_str("OLLAMA_URL", DEFAULT_OLLAMA_URL)
    return OllamaConfig(
        model=model or env_str("OLLAMA_MODEL", DEFAULT_OLLAMA_MODEL),
        resilience=default_ollama_resilience(url),
    )
