"""Raw play-count observations and the canonical entities they fold into."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import EntityKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .keys import GroupingKey


@dataclass(frozen=True, slots=True, kw_only=True)
class Image:
    url: str
    height: int | None = None
    width: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityMetadata:
    """Display-only data carried alongside a record. Never used for identity."""

    images: tuple[Image, ...] = ()
    genres: tuple[str, ...] = ()
    external_urls: Mapping[str, str] = field(default_factory=dict["str", "str"])

    def merged_with(self, other: EntityMetadata) -> EntityMetadata:
        images = other.images if len(other.images) > len(self.images) else self.images
        genres = tuple(dict.fromkeys((*self.genres, *other.genres)))
        external_urls = {**other.external_urls, **self.external_urls}
        return EntityMetadata(images=images, genres=genres, external_urls=external_urls)


@dataclass(frozen=True, slots=True, kw_only=True)
class RawRecord:
    """One observation of play activity for one entity variant."""

    entity_id: str
    display_name: str
    attribution_name: str | None
    play_count: int
    cumulative_duration_ms: int
    kind: EntityKind = EntityKind.ALBUM
    metadata: EntityMetadata = field(default_factory=EntityMetadata)


@dataclass(eq=False, kw_only=True)
class CanonicalEntity:
    """Merge of one or more raw records sharing a grouping key.

    Member lists are parallel and kept in merge order. ``canonical_name`` always names
    the member with the highest individual play count; on ties the first one seen wins.
    """

    grouping_key: GroupingKey
    kind: EntityKind
    attribution_name: str | None
    canonical_name: str = ""
    play_count: int = 0
    cumulative_duration_ms: int = 0
    metadata: EntityMetadata = field(default_factory=EntityMetadata)
    rank: int | None = None

    _member_ids: list[str] = field(default_factory=list["str"], init=False, repr=False)
    _member_play_counts: list[int] = field(default_factory=list["int"], init=False, repr=False)
    _member_names: list[str] = field(default_factory=list["str"], init=False, repr=False)

    @classmethod
    def seed(cls, key: GroupingKey, record: RawRecord) -> CanonicalEntity:
        entity = cls(
            grouping_key=key,
            kind=record.kind,
            attribution_name=record.attribution_name,
            metadata=record.metadata,
        )
        entity._append_member(record)
        return entity

    @property
    def member_ids(self) -> tuple[str, ...]:
        return tuple(self._member_ids)

    @property
    def member_play_counts(self) -> tuple[int, ...]:
        return tuple(self._member_play_counts)

    @property
    def member_names(self) -> tuple[str, ...]:
        return tuple(self._member_names)

    @property
    def member_count(self) -> int:
        return len(self._member_ids)

    def absorb(self, record: RawRecord) -> None:
        if record.kind is not self.kind:
            raise ValueError(f"Cannot merge a {record.kind} record into a {self.kind} entity")
        self.metadata = self.metadata.merged_with(record.metadata)
        self._append_member(record)

    def _append_member(self, record: RawRecord) -> None:
        self._member_ids.append(record.entity_id)
        self._member_play_counts.append(record.play_count)
        self._member_names.append(record.display_name)
        self.play_count += record.play_count
        self.cumulative_duration_ms += record.cumulative_duration_ms
        self.canonical_name = self._most_played_name()

    def _most_played_name(self) -> str:
        best_index = 0
        for index, count in enumerate(self._member_play_counts):
            if count > self._member_play_counts[best_index]:
                best_index = index
        return self._member_names[best_index]
