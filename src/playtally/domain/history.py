"""Incremental accumulation of listening events into the complete history.

``merge_incoming`` never deduplicates by event identity: submitting the same batch twice
counts every play twice. Callers that cannot guarantee disjoint batches should check
``find_resubmitted`` first.
"""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from playtally.domain.consolidation import build_grouping_key
from playtally.domain.model import (
    CompleteHistory,
    CompleteHistoryEntity,
    DateRange,
    EntityKind,
    EntityMetadata,
    HistoryMetadata,
    RawRecord,
    normalize_attribution,
    normalize_name,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from playtally.domain.model import GroupingKey, IncomingPlay, RuleStore, TrackInfo

log = getLogger(__name__)

type _KeyOf = Callable[[TrackInfo], str | None]
type _TextOf = Callable[[TrackInfo], str]


def history_key(track: TrackInfo, rule_store: RuleStore | None = None) -> GroupingKey:
    return build_grouping_key(track.primary_artist, track.name, rule_store)


def merge_incoming(
    aggregate: CompleteHistory,
    incoming: Iterable[IncomingPlay],
    *,
    rule_store: RuleStore | None = None,
    source: str | None = None,
    now: datetime | None = None,
) -> CompleteHistory:
    """Return a new aggregate with ``incoming`` folded in; ``aggregate`` is left untouched."""

    entities = [entity.copy() for entity in aggregate.entities]
    index: dict[GroupingKey, CompleteHistoryEntity] = {}
    for entity in entities:
        index.setdefault(history_key(entity.track, rule_store), entity)

    updated = added = 0
    for play in incoming:
        key = history_key(play.track, rule_store)
        entity = index.get(key)
        if entity is None:
            entity = CompleteHistoryEntity(track=play.track)
            index[key] = entity
            entities.append(entity)
            added += 1
            log.debug(f"Added {play.track.name!r} by {play.track.primary_artist}")
        else:
            updated += 1
        entity.record(play.event)

    log.info(f"Merged {updated + added} plays: {updated} updated, {added} new entities")
    metadata = summarize_history(
        entities,
        source=source if source is not None else aggregate.metadata.source,
        generated_at=now or datetime.now(UTC),
    )
    return CompleteHistory(entities=entities, metadata=metadata)


def find_resubmitted(
    aggregate: CompleteHistory,
    incoming: Iterable[IncomingPlay],
    *,
    rule_store: RuleStore | None = None,
) -> list[IncomingPlay]:
    """Plays whose key and timestamp are already recorded in ``aggregate``."""

    seen: set[tuple[GroupingKey, datetime]] = {
        (history_key(entity.track, rule_store), event.played_at)
        for entity in aggregate.entities
        for event in entity.events
    }
    return [
        play
        for play in incoming
        if (history_key(play.track, rule_store), play.event.played_at) in seen
    ]


def build_history(
    plays: Iterable[IncomingPlay],
    *,
    source: str,
    rule_store: RuleStore | None = None,
    now: datetime | None = None,
) -> CompleteHistory:
    ordered = sorted(plays, key=lambda play: play.event.played_at)
    return merge_incoming(
        CompleteHistory(), ordered, rule_store=rule_store, source=source, now=now
    )


def summarize_history(
    entities: Sequence[CompleteHistoryEntity],
    *,
    source: str,
    generated_at: datetime,
) -> HistoryMetadata:
    earliest: datetime | None = None
    latest: datetime | None = None
    total_events = 0
    for entity in entities:
        for event in entity.events:
            total_events += 1
            if earliest is None or event.played_at < earliest:
                earliest = event.played_at
            if latest is None or event.played_at > latest:
                latest = event.played_at
    return HistoryMetadata(
        total_entities=len(entities),
        total_events=total_events,
        total_listening_ms=sum(entity.cumulative_duration_ms for entity in entities),
        date_range=DateRange(earliest=earliest, latest=latest),
        source=source,
        generated_at=generated_at,
    )


def history_records(history: CompleteHistory, kind: EntityKind) -> list[RawRecord]:
    """Derive raw records of one kind from the aggregate, ready for consolidation."""

    match kind:
        case EntityKind.SONG:
            return [_song_record(entity) for entity in history.entities]
        case EntityKind.ALBUM:
            return _grouped_records(
                history.entities,
                kind=kind,
                key_of=_album_key,
                name_of=lambda track: track.album_name or "",
                id_of=lambda track: track.album_id or track.album_name or "",
            )
        case EntityKind.ARTIST:
            return _grouped_records(
                history.entities,
                kind=kind,
                key_of=lambda track: normalize_attribution(track.primary_artist),
                name_of=lambda track: track.primary_artist or "",
                id_of=lambda track: track.primary_artist or "",
            )


def _song_record(entity: CompleteHistoryEntity) -> RawRecord:
    track = entity.track
    return RawRecord(
        entity_id=track.track_id,
        display_name=track.name,
        attribution_name=track.primary_artist,
        play_count=entity.play_count,
        cumulative_duration_ms=entity.cumulative_duration_ms,
        kind=EntityKind.SONG,
        metadata=track.metadata,
    )


def _album_key(track: TrackInfo) -> str | None:
    if track.album_id:
        return track.album_id
    if track.album_name:
        return f"{normalize_attribution(track.primary_artist)}|||{normalize_name(track.album_name)}"
    return None


def _grouped_records(
    entities: Iterable[CompleteHistoryEntity],
    *,
    kind: EntityKind,
    key_of: _KeyOf,
    name_of: _TextOf,
    id_of: _TextOf,
) -> list[RawRecord]:
    grouped: dict[str, RawRecord] = {}
    for entity in entities:
        track = entity.track
        key = key_of(track)
        if key is None or not name_of(track):
            continue
        current = grouped.get(key)
        if current is None:
            grouped[key] = RawRecord(
                entity_id=id_of(track),
                display_name=name_of(track),
                attribution_name=track.primary_artist if kind is EntityKind.ALBUM else None,
                play_count=entity.play_count,
                cumulative_duration_ms=entity.cumulative_duration_ms,
                kind=kind,
                metadata=_metadata_for(kind, track),
            )
            continue
        grouped[key] = RawRecord(
            entity_id=current.entity_id,
            display_name=current.display_name,
            attribution_name=current.attribution_name,
            play_count=current.play_count + entity.play_count,
            cumulative_duration_ms=current.cumulative_duration_ms
            + entity.cumulative_duration_ms,
            kind=kind,
            metadata=current.metadata.merged_with(_metadata_for(kind, track)),
        )
    return list(grouped.values())


def _metadata_for(kind: EntityKind, track: TrackInfo) -> EntityMetadata:
    if kind is EntityKind.ARTIST:
        # Track metadata describes the album artwork, not the artist.
        return EntityMetadata(genres=track.metadata.genres)
    return track.metadata
