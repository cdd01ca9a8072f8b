"""Whole-file JSON snapshots selected by their embedded epoch-millisecond timestamp."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from playtally.adapters.top_entities import dump_payload, parse_raw_record
from playtally.config.storage import get_storage_config
from playtally.domain.consolidation import build_grouping_key
from playtally.domain.model import (
    CanonicalEntity,
    CompleteHistory,
    CompleteHistoryEntity,
    DateRange,
    EntityKind,
    EntityMetadata,
    EquivalenceRule,
    HistoryMetadata,
    Image,
    IncomingPlay,
    ListeningEvent,
    RawRecord,
    RuleStore,
    TrackInfo,
)

from .documents import (
    AlbumDocument,
    DateRangeDocument,
    DateWindowDocument,
    FetchDocument,
    FetchErrorDocument,
    FetchMetadataDocument,
    HistoryDocument,
    HistoryEntityDocument,
    HistoryMetadataDocument,
    ImageDocument,
    LeaderboardDocument,
    LeaderboardEntryDocument,
    LeaderboardMetadataDocument,
    ListeningEventDocument,
    RecentPlayDocument,
    RecentPlaysDocument,
    RecentPlaysMetadataDocument,
    RuleDocument,
    RuleFileDocument,
    TrackDocument,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

    from pydantic import BaseModel

    from playtally.adapters.top_entities import TopEntitiesFetchResult
    from playtally.config.storage import StorageConfig
    from playtally.config.top_entities import TopEntitiesConfig
    from playtally.domain.consolidation import ConsolidationResult

log = getLogger(__name__)

RECENT_PLAYS_PREFIX = "recent-plays"
HISTORY_PREFIX = "complete-listening-history"


def fetch_prefix(kind: EntityKind) -> str:
    return f"top-{kind.plural}"


def leaderboard_prefix(kind: EntityKind) -> str:
    return f"clean-top-{kind.plural}"


class SnapshotNotFoundError(FileNotFoundError):
    """No snapshot file with the requested prefix exists."""

    def __init__(self, prefix: str, directory: Path) -> None:
        super().__init__(f"No {prefix}-<timestamp>.json snapshot in {directory}")
        self.prefix = prefix
        self.directory = directory


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class SnapshotStore:
    storage: StorageConfig = field(default_factory=get_storage_config)
    clock: Callable[[], datetime] = field(default=_utcnow)

    # Generic file handling

    def path_for(self, prefix: str, *, directory: Path | None = None) -> Path:
        target = directory or self.storage.snapshot_dir()
        target.mkdir(parents=True, exist_ok=True)
        epoch_ms = int(self.clock().timestamp() * 1000)
        return target / f"{prefix}-{epoch_ms}.json"

    def list_snapshots(self, prefix: str, *, directory: Path | None = None) -> list[Path]:
        """Snapshots for ``prefix``, newest first."""

        target = directory or self.storage.snapshot_dir(ensure=False)
        if not target.is_dir():
            return []
        pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)\.json$")
        stamped: list[tuple[int, Path]] = []
        for path in target.iterdir():
            match = pattern.match(path.name)
            if match is not None:
                stamped.append((int(match.group(1)), path))
        stamped.sort(key=lambda item: item[0], reverse=True)
        return [path for _stamp, path in stamped]

    def latest(self, prefix: str, *, directory: Path | None = None) -> Path:
        snapshots = self.list_snapshots(prefix, directory=directory)
        if not snapshots:
            raise SnapshotNotFoundError(
                prefix, directory or self.storage.snapshot_dir(ensure=False)
            )
        return snapshots[0]

    def write_document(
        self,
        prefix: str,
        document: dict[str, object],
        *,
        directory: Path | None = None,
    ) -> Path:
        path = self.path_for(prefix, directory=directory)
        path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
        log.info(f"Wrote {path}")
        return path

    # Raw fetches

    def save_fetch(self, result: TopEntitiesFetchResult, config: TopEntitiesConfig) -> Path:
        kind = result.kind
        document = FetchDocument(
            metadata=FetchMetadataDocument(
                kind=kind.value,
                total_calls=result.calls_made,
                batch_size=config.page_size,
                date_range=DateWindowDocument(start=config.start, end=config.end),
                total=len(result.items),
                successful_calls=result.successful_calls,
                failed_calls=len(result.errors),
                timestamp=self.clock(),
            ),
            items=[dump_payload(item) for item in result.items],
            errors=[
                FetchErrorDocument(
                    call=error.call,
                    offset=error.offset,
                    error=error.message,
                    status_code=error.status_code,
                )
                for error in result.errors
            ],
        )
        data = _dump(document)
        data[kind.plural] = data.pop("items")
        return self.write_document(fetch_prefix(kind), data)

    def load_fetch_records(
        self, kind: EntityKind, path: Path | None = None
    ) -> tuple[Path, list[RawRecord]]:
        source = path or self.latest(fetch_prefix(kind))
        document = FetchDocument.model_validate_json(source.read_bytes())
        return source, [parse_raw_record(item, kind) for item in document.items]

    # Leaderboards

    def save_leaderboard(self, kind: EntityKind, result: ConsolidationResult) -> Path:
        counts = result.counts
        metadata = LeaderboardMetadataDocument(
            kind=kind.value,
            original_total=counts.original_total,
            consolidated_total=counts.consolidated_total,
            duplicates_removed=counts.duplicates_removed,
            consolidation_rate=counts.consolidation_rate,
            new_rules=len(result.new_rules),
            timestamp=self.clock(),
        )
        member_key = f"original_{kind.value}Ids"
        entries: list[dict[str, object]] = []
        for entity in result.entities:
            entry = _dump(_entry_document(entity))
            entry[member_key] = entry.pop("member_ids")
            entries.append(entry)
        return self.write_document(
            leaderboard_prefix(kind), {"metadata": _dump(metadata), kind.plural: entries}
        )

    def load_leaderboard(
        self, kind: EntityKind, path: Path | None = None
    ) -> tuple[Path, list[CanonicalEntity]]:
        source = path or self.latest(leaderboard_prefix(kind))
        document = LeaderboardDocument.model_validate_json(source.read_bytes())
        return source, [_entity_from_document(entry, kind) for entry in document.entries]

    # Rules

    def load_rules(self, kind: EntityKind) -> RuleStore:
        path = self.storage.rules_path(kind, ensure=False)
        if not path.exists():
            log.info(f"No rules file at {path}; starting with an empty rule store")
            return RuleStore()
        document = RuleFileDocument.model_validate_json(path.read_bytes())
        store = RuleStore(
            tuple(
                EquivalenceRule.from_names(
                    attribution_name=rule.artist_name,
                    canonical_name=rule.canonical_name,
                    names=rule.variations,
                )
                for rule in document.rules
            )
        )
        log.info(f"Loaded {len(store)} {kind} consolidation rules")
        return store

    def save_rules(self, kind: EntityKind, rule_store: RuleStore) -> Path:
        path = self.storage.rules_path(kind)
        document = RuleFileDocument(
            rules=[
                RuleDocument(
                    artist_name=rule.attribution_name,
                    canonical_name=rule.canonical_name,
                    variations=list(rule.variants),
                )
                for rule in rule_store
            ],
            timestamp=self.clock(),
        )
        path.write_text(json.dumps(_dump(document), indent=2, ensure_ascii=False), encoding="utf-8")
        log.info(f"Saved {len(rule_store)} {kind} consolidation rules to {path}")
        return path

    # Recent plays

    def save_recent_plays(self, plays: Sequence[IncomingPlay], *, source: str) -> Path:
        document = RecentPlaysDocument(
            metadata=RecentPlaysMetadataDocument(
                total_plays=len(plays), timestamp=self.clock(), source=source
            ),
            plays=[
                RecentPlayDocument(
                    **_track_document(play.track).model_dump(), played_at=play.event.played_at
                )
                for play in plays
            ],
        )
        return self.write_document(RECENT_PLAYS_PREFIX, _dump(document))

    def load_recent_plays(self, path: Path | None = None) -> tuple[Path, list[IncomingPlay]]:
        source = path or self.latest(RECENT_PLAYS_PREFIX)
        document = RecentPlaysDocument.model_validate_json(source.read_bytes())
        plays = [
            IncomingPlay(
                track=_track_info(play),
                event=ListeningEvent(played_at=play.played_at, ms_played=play.duration_ms or 0),
            )
            for play in document.plays
        ]
        return source, plays

    # Complete history

    def save_history(self, history: CompleteHistory) -> Path:
        metadata = history.metadata
        document = HistoryDocument(
            metadata=HistoryMetadataDocument(
                total_songs=metadata.total_entities,
                total_listening_events=metadata.total_events,
                total_listening_time=metadata.total_listening_ms,
                date_range=DateRangeDocument(
                    earliest=metadata.date_range.earliest, latest=metadata.date_range.latest
                ),
                timestamp=metadata.generated_at or self.clock(),
                source=metadata.source,
            ),
            songs=[_history_entity_document(entity) for entity in history.entities],
        )
        return self.write_document(
            HISTORY_PREFIX, _dump(document), directory=self.storage.history_dir()
        )

    def load_history(self, path: Path | None = None) -> tuple[Path, CompleteHistory]:
        source = path or self.latest(
            HISTORY_PREFIX, directory=self.storage.history_dir(ensure=False)
        )
        document = HistoryDocument.model_validate_json(source.read_bytes())
        entities = [
            CompleteHistoryEntity(
                track=_track_info(song),
                play_count=song.play_count,
                cumulative_duration_ms=song.total_listening_time,
                events=[
                    ListeningEvent(played_at=event.played_at, ms_played=event.ms_played)
                    for event in song.listening_events
                ],
            )
            for song in document.songs
        ]
        meta = document.metadata
        metadata = HistoryMetadata(
            total_entities=meta.total_songs,
            total_events=meta.total_listening_events,
            total_listening_ms=meta.total_listening_time,
            date_range=DateRange(earliest=meta.date_range.earliest, latest=meta.date_range.latest),
            source=meta.source,
            generated_at=meta.timestamp,
        )
        return source, CompleteHistory(entities=entities, metadata=metadata)


def _dump(document: BaseModel) -> dict[str, object]:
    return document.model_dump(mode="json", by_alias=True)


def _image_documents(images: Iterable[Image]) -> list[ImageDocument]:
    return [
        ImageDocument(url=image.url, height=image.height, width=image.width) for image in images
    ]


def _images(documents: Iterable[ImageDocument]) -> tuple[Image, ...]:
    return tuple(Image(url=doc.url, height=doc.height, width=doc.width) for doc in documents)


def _entry_document(entity: CanonicalEntity) -> LeaderboardEntryDocument:
    return LeaderboardEntryDocument(
        rank=entity.rank or 0,
        name=entity.canonical_name,
        artist_name=entity.attribution_name,
        count=entity.play_count,
        duration_ms=entity.cumulative_duration_ms,
        consolidated_count=entity.member_count,
        member_ids=list(entity.member_ids),
        original_counts=list(entity.member_play_counts),
        original_names=list(entity.member_names),
        images=_image_documents(entity.metadata.images),
        genres=list(entity.metadata.genres),
        external_urls=dict(entity.metadata.external_urls),
    )


def _entity_from_document(entry: LeaderboardEntryDocument, kind: EntityKind) -> CanonicalEntity:
    metadata = EntityMetadata(
        images=_images(entry.images),
        genres=tuple(entry.genres),
        external_urls=dict(entry.external_urls),
    )
    counts = entry.original_counts or [entry.count]
    ids = entry.member_ids or [entry.name]
    names = entry.original_names or [entry.name] * len(ids)
    entity: CanonicalEntity | None = None
    for index, (member_id, name, count) in enumerate(zip(ids, names, counts, strict=False)):
        # Per-member durations are not persisted; the total rides on the first member.
        record = RawRecord(
            entity_id=member_id,
            display_name=name,
            attribution_name=entry.artist_name,
            play_count=count,
            cumulative_duration_ms=entry.duration_ms if index == 0 else 0,
            kind=kind,
            metadata=metadata if index == 0 else EntityMetadata(),
        )
        if entity is None:
            key = build_grouping_key(entry.artist_name, entry.name)
            entity = CanonicalEntity.seed(key, record)
        else:
            entity.absorb(record)
    if entity is None:
        raise ValueError(f"Leaderboard entry {entry.name!r} has no members")
    entity.rank = entry.rank
    return entity


def _track_document(track: TrackInfo) -> TrackDocument:
    return TrackDocument(
        song_id=track.track_id,
        name=track.name,
        duration_ms=track.duration_ms,
        artists=list(track.artists),
        album=AlbumDocument(
            id=track.album_id,
            name=track.album_name,
            images=_image_documents(track.metadata.images),
        ),
        genres=list(track.metadata.genres),
        popularity=track.popularity,
        external_urls=dict(track.metadata.external_urls),
    )


def _track_info(document: TrackDocument) -> TrackInfo:
    return TrackInfo(
        track_id=document.song_id,
        name=document.name,
        artists=tuple(document.artists),
        album_id=document.album.id,
        album_name=document.album.name,
        duration_ms=document.duration_ms,
        popularity=document.popularity,
        metadata=EntityMetadata(
            images=_images(document.album.images),
            genres=tuple(document.genres),
            external_urls=dict(document.external_urls),
        ),
    )


def _history_entity_document(entity: CompleteHistoryEntity) -> HistoryEntityDocument:
    return HistoryEntityDocument(
        **_track_document(entity.track).model_dump(),
        play_count=entity.play_count,
        total_listening_time=entity.cumulative_duration_ms,
        listening_events=[
            ListeningEventDocument(played_at=event.played_at, ms_played=event.ms_played)
            for event in entity.events
        ],
    )
