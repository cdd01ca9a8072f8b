"""Fold raw play-count records into a ranked, deduplicated leaderboard."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from playtally.domain.model import (
    CanonicalEntity,
    EquivalenceRule,
    GroupingKey,
    RawRecord,
    RuleStore,
    ValidationError,
    normalize_name,
)

from .normalize import build_grouping_key, cluster_key
from .resolve import AutoResolver, Decision, auto_decision, most_played, names_identical

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .resolve import Cluster, Resolver

log = getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.7
DEFAULT_TOP_N = 500


@dataclass(frozen=True, slots=True, kw_only=True)
class ClusterDecision:
    """A decision together with the cluster it was made for."""

    cluster: tuple[RawRecord, ...]
    decision: Decision
    automatic: bool
    approved: bool

    @property
    def attribution_name(self) -> str | None:
        return self.cluster[0].attribution_name

    @property
    def member_names(self) -> tuple[str, ...]:
        return tuple(record.display_name for record in self.cluster)


@dataclass(frozen=True, slots=True, kw_only=True)
class ConsolidationCounts:
    original_total: int = 0
    consolidated_total: int = 0

    @property
    def duplicates_removed(self) -> int:
        return self.original_total - self.consolidated_total

    @property
    def consolidation_rate(self) -> float:
        """Share of input records folded away, as a percentage with two decimals."""

        if self.original_total == 0:
            return 0.0
        return round(self.duplicates_removed / self.original_total * 100, 2)


@dataclass(frozen=True, slots=True, kw_only=True)
class ConsolidationResult:
    entities: list[CanonicalEntity]
    rule_store: RuleStore
    decisions: tuple[ClusterDecision, ...] = ()
    new_rules: tuple[EquivalenceRule, ...] = ()
    counts: ConsolidationCounts = ConsolidationCounts()


def validate_record(record: RawRecord) -> RawRecord:
    """Reject records the engine cannot sum safely."""

    if not isinstance(record.display_name, str):
        raise ValidationError(
            f"Record {record.entity_id!r} has no display name", entity_id=record.entity_id
        )
    for field_name in ("play_count", "cumulative_duration_ms"):
        value = getattr(record, field_name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"Record {record.entity_id!r} has non-integer {field_name}: {value!r}",
                entity_id=record.entity_id,
            )
        if value < 0:
            raise ValidationError(
                f"Record {record.entity_id!r} has negative {field_name}: {value}",
                entity_id=record.entity_id,
            )
    return record


def consolidate(
    records: Iterable[RawRecord],
    *,
    rule_store: RuleStore | None = None,
    resolver: Resolver | None = None,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    top_n: int | None = DEFAULT_TOP_N,
) -> ConsolidationResult:
    """Merge equivalent records and rank the result.

    Every record is validated before any clustering happens, so a bad record leaves the
    rule store untouched. Approved merges are appended to the returned rule store; the
    input store is never modified.
    """

    batch = [validate_record(record) for record in records]
    store = rule_store if rule_store is not None else RuleStore()
    if not batch:
        return ConsolidationResult(entities=[], rule_store=store)

    active_resolver: Resolver = resolver if resolver is not None else AutoResolver()
    clusters = candidate_clusters(batch)

    automatic: list[Cluster] = []
    pending: list[Cluster] = []
    for cluster in clusters:
        if len(cluster) < 2:  # noqa: PLR2004
            continue
        if names_identical(cluster):
            automatic.append(cluster)
        elif not _is_covered(cluster, store):
            pending.append(cluster)

    decided = [
        ClusterDecision(
            cluster=tuple(cluster), decision=auto_decision(cluster), automatic=True, approved=True
        )
        for cluster in automatic
    ]
    if pending:
        log.info(f"Resolving {len(pending)} ambiguous clusters ({active_resolver.policy})")
        decisions = active_resolver.resolve_all(pending)
        if len(decisions) != len(pending):
            raise RuntimeError(
                f"Resolver returned {len(decisions)} decisions for {len(pending)} clusters"
            )
        decided.extend(
            ClusterDecision(
                cluster=tuple(cluster),
                decision=decision,
                automatic=False,
                approved=decision.approves(confidence_threshold),
            )
            for cluster, decision in zip(pending, decisions, strict=True)
        )

    new_rules: list[EquivalenceRule] = []
    for item in decided:
        if not item.approved or _is_covered(item.cluster, store):
            continue
        rule = rule_for_cluster(item.cluster, item.decision, store)
        store = store.with_rule(rule)
        new_rules.append(rule)

    entities = fold_records(batch, store)
    ranked = rank_entities(entities, top_n=top_n)
    counts = ConsolidationCounts(original_total=len(batch), consolidated_total=len(entities))
    log.info(
        f"Consolidated {counts.original_total} records into {counts.consolidated_total} "
        f"entities ({counts.duplicates_removed} duplicates, {counts.consolidation_rate}%)"
    )
    return ConsolidationResult(
        entities=ranked,
        rule_store=store,
        decisions=tuple(decided),
        new_rules=tuple(new_rules),
        counts=counts,
    )


def candidate_clusters(records: Sequence[RawRecord]) -> list[list[RawRecord]]:
    """Group records by attribution and base name, keeping first-seen order."""

    clusters: dict[GroupingKey, list[RawRecord]] = {}
    for record in records:
        clusters.setdefault(cluster_key(record.attribution_name, record.display_name), []).append(
            record
        )
    return list(clusters.values())


def rule_for_cluster(
    cluster: Cluster, decision: Decision, rule_store: RuleStore | None = None
) -> EquivalenceRule:
    """Build the rule an approved decision implies.

    If an existing rule already folds any member, its canonical name is kept so old and new
    variants land on one grouping key; the store resolves names by first matching rule.
    """

    inherited = _inherited_canonical(cluster, rule_store) if rule_store is not None else None
    if inherited is not None:
        return EquivalenceRule.from_names(
            attribution_name=cluster[0].attribution_name,
            canonical_name=inherited,
            names=(record.display_name for record in cluster),
        )
    canonical_key = normalize_name(decision.canonical_name)
    canonical = next(
        (record for record in cluster if normalize_name(record.display_name) == canonical_key),
        None,
    )
    if canonical is None:
        # The decision named something outside the cluster; fall back to the members.
        canonical = most_played(cluster)
    return EquivalenceRule.from_names(
        attribution_name=cluster[0].attribution_name,
        canonical_name=canonical.display_name,
        names=(record.display_name for record in cluster),
    )


def fold_records(records: Iterable[RawRecord], rule_store: RuleStore) -> list[CanonicalEntity]:
    entities: dict[GroupingKey, CanonicalEntity] = {}
    for record in records:
        key = build_grouping_key(record.attribution_name, record.display_name, rule_store)
        entity = entities.get(key)
        if entity is None:
            entities[key] = CanonicalEntity.seed(key, record)
        else:
            entity.absorb(record)
    return list(entities.values())


def rank_entities(
    entities: Iterable[CanonicalEntity], *, top_n: int | None = DEFAULT_TOP_N
) -> list[CanonicalEntity]:
    """Sort by play count (stable), truncate, then number from 1."""

    ordered = sorted(entities, key=lambda entity: entity.play_count, reverse=True)
    if top_n is not None:
        ordered = ordered[:top_n]
    for position, entity in enumerate(ordered, start=1):
        entity.rank = position
    return ordered


def _is_covered(cluster: Cluster, rule_store: RuleStore) -> bool:
    """True when existing rules already fold every member onto one key."""

    keys: set[GroupingKey] = set()
    for record in cluster:
        key = build_grouping_key(record.attribution_name, record.display_name, rule_store)
        if rule_store.lookup(key.attribution, normalize_name(record.display_name)) is None:
            return False
        keys.add(key)
    return len(keys) == 1


def _inherited_canonical(cluster: Cluster, rule_store: RuleStore) -> str | None:
    for record in cluster:
        key = build_grouping_key(record.attribution_name, record.display_name)
        rule = rule_store.lookup(key.attribution, key.name)
        if rule is not None:
            return rule.canonical_name
    return None
