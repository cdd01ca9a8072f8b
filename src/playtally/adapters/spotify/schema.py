"""Minimal Pydantic models for the Spotify Web API."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field


class SpotifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SpotifyImage(SpotifyBaseModel):
    url: str
    height: int | None = None
    width: int | None = None


class SpotifyArtist(SpotifyBaseModel):
    id: str | None = None
    name: str
    genres: list[str] = Field(default_factory=list["str"])


class SpotifyAlbum(SpotifyBaseModel):
    id: str | None = None
    name: str
    images: list[SpotifyImage] = Field(default_factory=list["SpotifyImage"])
    artists: list[SpotifyArtist] = Field(default_factory=list["SpotifyArtist"])


class SpotifyTrack(SpotifyBaseModel):
    id: str
    name: str
    duration_ms: int | None = None
    popularity: int | None = None
    preview_url: str | None = None
    album: SpotifyAlbum | None = None
    artists: list[SpotifyArtist] = Field(default_factory=list["SpotifyArtist"])
    external_urls: dict[str, str] = Field(default_factory=dict)


class PlayHistoryItem(SpotifyBaseModel):
    track: SpotifyTrack
    played_at: datetime


class SpotifyCursor(SpotifyBaseModel):
    after: str | None = None
    before: str | None = None


class RecentlyPlayedPage(SpotifyBaseModel):
    href: str | None = None
    limit: int | None = None
    next: str | None = None
    cursors: SpotifyCursor | None = None
    items: list[PlayHistoryItem] = Field(default_factory=list["PlayHistoryItem"])


class SeveralTracksResponse(SpotifyBaseModel):
    # Unknown ids come back as null entries in request order.
    tracks: list[SpotifyTrack | None] = Field(default_factory=list["SpotifyTrack | None"])


class SeveralArtistsResponse(SpotifyBaseModel):
    artists: list[SpotifyArtist | None] = Field(default_factory=list["SpotifyArtist | None"])
