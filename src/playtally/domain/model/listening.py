"""Listening events and the long-lived complete-history aggregate."""

from __future__ import annotations

from bisect import insort
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .records import EntityMetadata

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class ListeningEvent:
    played_at: datetime
    ms_played: int


@dataclass(frozen=True, slots=True, kw_only=True)
class TrackInfo:
    """Identity and display data for one song as reported by a source."""

    track_id: str
    name: str
    artists: tuple[str, ...] = ()
    album_id: str | None = None
    album_name: str | None = None
    duration_ms: int | None = None
    popularity: int | None = None
    metadata: EntityMetadata = field(default_factory=EntityMetadata)

    @property
    def primary_artist(self) -> str | None:
        return self.artists[0] if self.artists else None


@dataclass(frozen=True, slots=True, kw_only=True)
class IncomingPlay:
    track: TrackInfo
    event: ListeningEvent


@dataclass(eq=False, kw_only=True)
class CompleteHistoryEntity:
    track: TrackInfo
    play_count: int = 0
    cumulative_duration_ms: int = 0
    events: list[ListeningEvent] = field(default_factory=list["ListeningEvent"])

    def record(self, event: ListeningEvent) -> None:
        self.play_count += 1
        self.cumulative_duration_ms += event.ms_played
        # Chronological interleave; equal timestamps keep arrival order.
        insort(self.events, event, key=_played_at)

    def copy(self) -> CompleteHistoryEntity:
        return replace(self, events=list(self.events))


@dataclass(frozen=True, slots=True, kw_only=True)
class DateRange:
    earliest: datetime | None = None
    latest: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class HistoryMetadata:
    total_entities: int = 0
    total_events: int = 0
    total_listening_ms: int = 0
    date_range: DateRange = field(default_factory=DateRange)
    source: str = ""
    generated_at: datetime | None = None


@dataclass(kw_only=True)
class CompleteHistory:
    entities: list[CompleteHistoryEntity] = field(
        default_factory=list["CompleteHistoryEntity"]
    )
    metadata: HistoryMetadata = field(default_factory=HistoryMetadata)

    @property
    def total_events(self) -> int:
        return sum(len(entity.events) for entity in self.entities)


def _played_at(event: ListeningEvent) -> datetime:
    return event.played_at
