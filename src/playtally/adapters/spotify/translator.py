"""Translate Spotify payloads into listening-history values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from playtally.domain.model import (
    EntityMetadata,
    Image,
    IncomingPlay,
    ListeningEvent,
    TrackInfo,
)

if TYPE_CHECKING:
    from .schema import PlayHistoryItem, SpotifyTrack


def translate_track(track: SpotifyTrack, *, genres: tuple[str, ...] = ()) -> TrackInfo:
    album = track.album
    images = tuple(
        Image(url=image.url, height=image.height, width=image.width)
        for image in (album.images if album is not None else ())
    )
    return TrackInfo(
        track_id=track.id,
        name=track.name,
        artists=tuple(artist.name for artist in track.artists),
        album_id=album.id if album is not None else None,
        album_name=album.name if album is not None else None,
        duration_ms=track.duration_ms,
        popularity=track.popularity,
        metadata=EntityMetadata(
            images=images, genres=genres, external_urls=dict(track.external_urls)
        ),
    )


def translate_play(item: PlayHistoryItem) -> IncomingPlay:
    # The endpoint reports when a track started, not how long it ran.
    return IncomingPlay(
        track=translate_track(item.track),
        event=ListeningEvent(played_at=item.played_at, ms_played=item.track.duration_ms or 0),
    )
