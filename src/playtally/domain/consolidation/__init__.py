"""Consolidation core: key building, clustering, resolving and folding."""

from __future__ import annotations

from .engine import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_TOP_N,
    ClusterDecision,
    ConsolidationCounts,
    ConsolidationResult,
    candidate_clusters,
    consolidate,
    fold_records,
    rank_entities,
    rule_for_cluster,
    validate_record,
)
from .entity_adapter import EntityAdapter
from .normalize import base_name, build_grouping_key, cluster_key
from .resolve import (
    AutoResolver,
    Cluster,
    Decision,
    Resolver,
    auto_decision,
    fallback_decision,
    most_played,
    names_identical,
)

__all__ = [
    "DEFAULT_CONFIDENCE_THRESHOLD",
    "DEFAULT_TOP_N",
    "AutoResolver",
    "Cluster",
    "ClusterDecision",
    "ConsolidationCounts",
    "ConsolidationResult",
    "Decision",
    "EntityAdapter",
    "Resolver",
    "auto_decision",
    "base_name",
    "build_grouping_key",
    "candidate_clusters",
    "cluster_key",
    "consolidate",
    "fallback_decision",
    "fold_records",
    "most_played",
    "names_identical",
    "rank_entities",
    "rule_for_cluster",
    "validate_record",
]
