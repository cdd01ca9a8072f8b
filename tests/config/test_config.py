from __future__ import annotations

import os

import pytest

from playtally.adapters.http_resilience import build_retry
from playtally.config import (
    InvalidConfigurationValueError,
    MissingConfigurationError,
    env_float,
    env_int,
    get_consolidation_config,
    get_ollama_config,
    get_top_entities_config,
    require_env_var,
    require_env_vars,
)
from playtally.config.ollama import DEFAULT_OLLAMA_MODEL, DEFAULT_OLLAMA_URL
from playtally.config.top_entities import DEFAULT_PAGE_SIZE, DEFAULT_TOP_API_URL


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR"])

    assert "MISSING_VAR" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_require_env_vars_restores_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEMP_VAR", "123")

    assert os.getenv("TEMP_VAR") == "123"
    result = require_env_var("TEMP_VAR")
    assert result == "123"


def test_env_int_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOME_INT", "twelve")

    with pytest.raises(InvalidConfigurationValueError) as exc:
        env_int("SOME_INT", 3)

    assert exc.value.name == "SOME_INT"
    assert "twelve" in str(exc.value)


def test_env_numbers_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SOME_INT", raising=False)
    monkeypatch.setenv("SOME_FLOAT", " ")

    assert env_int("SOME_INT", 3) == 3
    assert env_float("SOME_FLOAT", 0.5) == 0.5


def test_top_entities_config_requires_token() -> None:
    with pytest.raises(MissingConfigurationError) as exc:
        get_top_entities_config()

    assert "TOP_API_TOKEN" in str(exc.value)


def test_top_entities_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOP_API_TOKEN", "secret")
    monkeypatch.setenv("TOP_API_TOTAL_CALLS", "7")

    config = get_top_entities_config()

    assert config.token == "secret"
    assert config.total_calls == 7
    assert config.page_size == DEFAULT_PAGE_SIZE
    assert config.resilience.base_url == DEFAULT_TOP_API_URL
    assert config.resilience.ratelimit is not None


def test_ollama_config_prefers_explicit_model(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OLLAMA_MODEL", "from-env")

    assert get_ollama_config().model == "from-env"
    assert get_ollama_config(model="explicit").model == "explicit"


def test_ollama_config_defaults() -> None:
    config = get_ollama_config()

    assert config.model == DEFAULT_OLLAMA_MODEL
    assert config.resilience.base_url == DEFAULT_OLLAMA_URL
    assert config.resilience.cache is None
    assert config.resilience.retry.total == 0
    assert build_retry(config.resilience.retry).total == 0


def test_consolidation_config_treats_non_positive_top_n_as_unbounded(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PLAYTALLY_TOP_N", "0")
    monkeypatch.setenv("PLAYTALLY_CONFIDENCE_THRESHOLD", "0.85")

    config = get_consolidation_config()

    assert config.top_n is None
    assert config.confidence_threshold == 0.85
