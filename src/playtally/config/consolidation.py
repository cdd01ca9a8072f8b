"""Defaults for the consolidation engine and its resolvers."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int

DEFAULT_CONFIDENCE_THRESHOLD = 0.7
DEFAULT_TOP_N = 500
DEFAULT_ORACLE_BATCH_SIZE = 5
DEFAULT_ORACLE_BATCH_PAUSE_SECONDS = 0.2
DEFAULT_RULE_EXAMPLES = 3


@dataclass(frozen=True, slots=True)
class ConsolidationConfig:
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    top_n: int | None = DEFAULT_TOP_N
    oracle_batch_size: int = DEFAULT_ORACLE_BATCH_SIZE
    oracle_batch_pause_seconds: float = DEFAULT_ORACLE_BATCH_PAUSE_SECONDS
    rule_examples: int = DEFAULT_RULE_EXAMPLES


def get_consolidation_config() -> ConsolidationConfig:
    top_n = env_int("PLAYTALLY_TOP_N", DEFAULT_TOP_N)
    return ConsolidationConfig(
        confidence_threshold=env_float(
            "PLAYTALLY_CONFIDENCE_THRESHOLD", DEFAULT_CONFIDENCE_THRESHOLD
        ),
        top_n=top_n if top_n > 0 else None,
        oracle_batch_size=env_int("PLAYTALLY_ORACLE_BATCH_SIZE", DEFAULT_ORACLE_BATCH_SIZE),
    )
