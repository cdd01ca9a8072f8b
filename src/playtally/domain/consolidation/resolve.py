"""Decisions for ambiguous clusters and the resolver strategies' common surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from playtally.domain.model import ConfidenceBand, RawRecord, ResolverPolicy, normalize_name

if TYPE_CHECKING:
    from collections.abc import Sequence

type Cluster = Sequence[RawRecord]


@dataclass(frozen=True, slots=True, kw_only=True)
class Decision:
    should_consolidate: bool
    confidence: float
    canonical_name: str
    reasoning: str = ""

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    @property
    def band(self) -> ConfidenceBand:
        return ConfidenceBand.for_confidence(self.confidence)

    def approves(self, threshold: float) -> bool:
        return self.should_consolidate and self.confidence >= threshold


class Resolver(Protocol):
    """Decides whether the members of a cluster denote one entity.

    ``resolve_all`` returns exactly one decision per cluster, in cluster order.
    """

    @property
    def policy(self) -> ResolverPolicy: ...

    def resolve(self, cluster: Cluster) -> Decision: ...

    def resolve_all(self, clusters: Sequence[Cluster]) -> list[Decision]: ...


def names_identical(cluster: Cluster) -> bool:
    return len({normalize_name(record.display_name) for record in cluster}) <= 1


def most_played(cluster: Cluster) -> RawRecord:
    """Member with the highest play count; the first one seen wins ties."""

    if not cluster:
        raise ValueError("Cannot pick a member from an empty cluster")
    best = cluster[0]
    for record in cluster[1:]:
        if record.play_count > best.play_count:
            best = record
    return best


def fallback_decision(cluster: Cluster, reason: str) -> Decision:
    return Decision(
        should_consolidate=False,
        confidence=0.0,
        canonical_name=cluster[0].display_name if cluster else "",
        reasoning=reason,
    )


def auto_decision(cluster: Cluster) -> Decision:
    if names_identical(cluster):
        return Decision(
            should_consolidate=True,
            confidence=1.0,
            canonical_name=most_played(cluster).display_name,
            reasoning="Identical names",
        )
    return fallback_decision(cluster, "Names differ; automatic policy keeps them separate")


class AutoResolver:
    """Merges only clusters whose names already agree under case-folding."""

    policy = ResolverPolicy.AUTO

    def resolve(self, cluster: Cluster) -> Decision:
        return auto_decision(cluster)

    def resolve_all(self, clusters: Sequence[Cluster]) -> list[Decision]:
        return [self.resolve(cluster) for cluster in clusters]
