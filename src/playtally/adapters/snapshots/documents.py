"""Pydantic documents for the JSON snapshot files.

Field aliases keep the camelCase names used by files written before this package
existed, so old snapshots stay readable.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SnapshotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ImageDocument(SnapshotBaseModel):
    url: str
    height: int | None = None
    width: int | None = None


# Rules


class RuleDocument(SnapshotBaseModel):
    artist_name: str = Field(alias="artistName")
    canonical_name: str = Field(
        alias="canonicalName",
        validation_alias=AliasChoices("canonicalName", "baseAlbumName", "canonical_name"),
    )
    variations: list[str] = Field(default_factory=list)


class RuleFileDocument(SnapshotBaseModel):
    rules: list[RuleDocument] = Field(default_factory=list["RuleDocument"])
    timestamp: datetime | None = None


# Raw fetches


class DateWindowDocument(SnapshotBaseModel):
    start: str
    end: str


class FetchErrorDocument(SnapshotBaseModel):
    call: int
    offset: int
    error: str
    status_code: int | None = Field(default=None, alias="statusCode")


class FetchMetadataDocument(SnapshotBaseModel):
    kind: str
    total_calls: int = Field(alias="totalCalls")
    batch_size: int = Field(alias="batchSize")
    date_range: DateWindowDocument = Field(alias="dateRange")
    total: int
    successful_calls: int = Field(alias="successfulCalls")
    failed_calls: int = Field(alias="failedCalls")
    timestamp: datetime


class FetchDocument(SnapshotBaseModel):
    metadata: FetchMetadataDocument
    items: list[dict[str, object]] = Field(
        default_factory=list,
        validation_alias=AliasChoices("items", "songs", "albums", "artists"),
    )
    errors: list[FetchErrorDocument] = Field(default_factory=list["FetchErrorDocument"])


# Leaderboards


class LeaderboardMetadataDocument(SnapshotBaseModel):
    kind: str
    original_total: int = Field(alias="originalTotal")
    consolidated_total: int = Field(alias="consolidatedTotal")
    duplicates_removed: int = Field(alias="duplicatesRemoved")
    consolidation_rate: float = Field(alias="consolidationRate")
    new_rules: int = Field(default=0, alias="newRules")
    timestamp: datetime


class LeaderboardEntryDocument(SnapshotBaseModel):
    rank: int
    name: str
    artist_name: str | None = Field(default=None, alias="artistName")
    count: int
    duration_ms: int
    consolidated_count: int
    member_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "original_songIds", "original_albumIds", "original_artistIds", "member_ids"
        ),
    )
    original_counts: list[int] = Field(default_factory=list)
    original_names: list[str] = Field(default_factory=list)
    images: list[ImageDocument] = Field(default_factory=list["ImageDocument"])
    genres: list[str] = Field(default_factory=list)
    external_urls: dict[str, str] = Field(default_factory=dict)


class LeaderboardDocument(SnapshotBaseModel):
    metadata: LeaderboardMetadataDocument
    entries: list[LeaderboardEntryDocument] = Field(
        default_factory=list["LeaderboardEntryDocument"],
        validation_alias=AliasChoices("entries", "songs", "albums", "artists"),
    )


# Listening history


class AlbumDocument(SnapshotBaseModel):
    id: str | None = None
    name: str | None = None
    images: list[ImageDocument] = Field(default_factory=list["ImageDocument"])


class ListeningEventDocument(SnapshotBaseModel):
    played_at: datetime = Field(alias="playedAt")
    ms_played: int = Field(alias="msPlayed")


class TrackDocument(SnapshotBaseModel):
    song_id: str = Field(alias="songId", validation_alias=AliasChoices("songId", "id"))
    name: str
    duration_ms: int | None = None
    artists: list[str] = Field(default_factory=list)
    album: AlbumDocument = Field(default_factory=AlbumDocument)
    genres: list[str] = Field(default_factory=list)
    popularity: int | None = None
    external_urls: dict[str, str] = Field(default_factory=dict)


class RecentPlayDocument(TrackDocument):
    played_at: datetime


class RecentPlaysMetadataDocument(SnapshotBaseModel):
    total_plays: int = Field(alias="totalPlays")
    timestamp: datetime
    source: str


class RecentPlaysDocument(SnapshotBaseModel):
    metadata: RecentPlaysMetadataDocument
    plays: list[RecentPlayDocument] = Field(default_factory=list["RecentPlayDocument"])


class HistoryEntityDocument(TrackDocument):
    play_count: int = Field(alias="playCount")
    total_listening_time: int = Field(alias="totalListeningTime")
    listening_events: list[ListeningEventDocument] = Field(
        default_factory=list["ListeningEventDocument"], alias="listeningEvents"
    )


class DateRangeDocument(SnapshotBaseModel):
    earliest: datetime | None = None
    latest: datetime | None = None


class HistoryMetadataDocument(SnapshotBaseModel):
    total_songs: int = Field(alias="totalSongs")
    total_listening_events: int = Field(alias="totalListeningEvents")
    total_listening_time: int = Field(alias="totalListeningTime")
    date_range: DateRangeDocument = Field(alias="dateRange")
    timestamp: datetime | None = None
    source: str = ""


class HistoryDocument(SnapshotBaseModel):
    metadata: HistoryMetadataDocument
    songs: list[HistoryEntityDocument] = Field(default_factory=list["HistoryEntityDocument"])
