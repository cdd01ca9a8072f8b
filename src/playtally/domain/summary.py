"""Read-only reports over leaderboards and resolver decisions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from playtally.domain.model import UNKNOWN_ATTRIBUTION, ConfidenceBand, normalize_attribution

if TYPE_CHECKING:
    from collections.abc import Iterable

    from playtally.domain.consolidation import ClusterDecision
    from playtally.domain.model import CanonicalEntity

DEFAULT_GENRE_LIMIT = 20


@dataclass(frozen=True, slots=True, kw_only=True)
class AttributionSummary:
    attribution_name: str
    entity_names: tuple[str, ...]
    total_plays: int
    total_duration_ms: int
    genres: tuple[str, ...]

    @property
    def entity_count(self) -> int:
        return len(self.entity_names)


@dataclass(frozen=True, slots=True, kw_only=True)
class GenreStanding:
    genre: str
    entity_count: int
    total_plays: int


@dataclass(frozen=True, slots=True, kw_only=True)
class DecisionSummary:
    total: int
    consolidated: int
    kept_separate: int
    by_band: dict[ConfidenceBand, int]
    needs_review: tuple[ClusterDecision, ...]


def summarize_by_attribution(entities: Iterable[CanonicalEntity]) -> list[AttributionSummary]:
    """Group a leaderboard by artist; most entities first, then most plays.

    Entity names within a group keep leaderboard order.
    """

    groups: dict[str, list[CanonicalEntity]] = {}
    for entity in sorted(entities, key=lambda item: item.rank or 0):
        groups.setdefault(normalize_attribution(entity.attribution_name), []).append(entity)

    summaries = [
        AttributionSummary(
            attribution_name=members[0].attribution_name or UNKNOWN_ATTRIBUTION,
            entity_names=tuple(member.canonical_name for member in members),
            total_plays=sum(member.play_count for member in members),
            total_duration_ms=sum(member.cumulative_duration_ms for member in members),
            genres=tuple(
                dict.fromkeys(genre for member in members for genre in member.metadata.genres)
            ),
        )
        for members in groups.values()
    ]
    summaries.sort(key=lambda summary: (summary.entity_count, summary.total_plays), reverse=True)
    return summaries


def rank_genres(
    entities: Iterable[CanonicalEntity], *, limit: int | None = DEFAULT_GENRE_LIMIT
) -> list[GenreStanding]:
    counts: dict[str, tuple[int, int]] = {}
    for entity in entities:
        for genre in dict.fromkeys(entity.metadata.genres):
            entity_count, plays = counts.get(genre, (0, 0))
            counts[genre] = (entity_count + 1, plays + entity.play_count)

    standings = [
        GenreStanding(genre=genre, entity_count=entity_count, total_plays=plays)
        for genre, (entity_count, plays) in counts.items()
    ]
    standings.sort(
        key=lambda standing: (standing.entity_count, standing.total_plays), reverse=True
    )
    return standings if limit is None else standings[:limit]


def summarize_decisions(
    decisions: Iterable[ClusterDecision], *, review_threshold: float = 0.7
) -> DecisionSummary:
    """Tally resolver decisions by confidence band.

    Automatic merges of identical names are excluded; they carry no judgement worth
    reviewing.
    """

    judged = [item for item in decisions if not item.automatic]
    by_band = dict.fromkeys(ConfidenceBand, 0)
    for item in judged:
        by_band[item.decision.band] += 1
    return DecisionSummary(
        total=len(judged),
        consolidated=sum(1 for item in judged if item.approved),
        kept_separate=sum(1 for item in judged if not item.approved),
        by_band=by_band,
        needs_review=tuple(
            item for item in judged if item.decision.confidence < review_threshold
        ),
    )
