"""Pydantic models describing the top-entities statistics API payloads."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


def _none_to_zero(value: object) -> object:
    return 0 if value is None else value


class TopEntitiesBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ImagePayload(TopEntitiesBaseModel):
    url: str
    height: int | None = None
    width: int | None = None


class ArtistInfo(TopEntitiesBaseModel):
    name: str = ""
    genres: list[str] = Field(default_factory=list)
    images: list[ImagePayload] = Field(default_factory=list)
    external_urls: dict[str, str] = Field(default_factory=dict)

    _normalize_name = field_validator("name", mode="before")(_none_to_empty)


class AlbumInfo(TopEntitiesBaseModel):
    name: str = ""
    images: list[ImagePayload] = Field(default_factory=list)
    external_urls: dict[str, str] = Field(default_factory=dict)

    _normalize_name = field_validator("name", mode="before")(_none_to_empty)


class TrackInfoPayload(TopEntitiesBaseModel):
    name: str = ""
    preview_url: str | None = None
    external_urls: dict[str, str] = Field(default_factory=dict)

    _normalize_name = field_validator("name", mode="before")(_none_to_empty)


class TopEntryPayload(TopEntitiesBaseModel):
    count: int
    duration_ms: int = 0

    _normalize_duration = field_validator("duration_ms", mode="before")(_none_to_zero)


class TopSongPayload(TopEntryPayload):
    song_id: str = Field(
        validation_alias=AliasChoices("trackId", "songId", "song_id"),
        serialization_alias="trackId",
    )
    track: TrackInfoPayload = Field(default_factory=TrackInfoPayload)
    album: AlbumInfo = Field(default_factory=AlbumInfo)
    artist: ArtistInfo = Field(default_factory=ArtistInfo)


class TopAlbumPayload(TopEntryPayload):
    album_id: str = Field(
        validation_alias=AliasChoices("albumId", "album_id"),
        serialization_alias="albumId",
    )
    album: AlbumInfo = Field(default_factory=AlbumInfo)
    artist: ArtistInfo = Field(default_factory=ArtistInfo)


class TopArtistPayload(TopEntryPayload):
    artist_id: str = Field(
        validation_alias=AliasChoices("artistId", "primaryArtistId", "artist_id"),
        serialization_alias="artistId",
    )
    differents: int | None = None
    artist: ArtistInfo = Field(default_factory=ArtistInfo)


type TopEntityPayload = TopSongPayload | TopAlbumPayload | TopArtistPayload
