"""Spotipy-based client wrapper for Spotify Web API."""

from __future__ import annotations

from typing import TYPE_CHECKING

import spotipy
from spotipy.oauth2 import SpotifyOAuth

from .schema import (
    PlayHistoryItem,
    RecentlyPlayedPage,
    SeveralArtistsResponse,
    SeveralTracksResponse,
    SpotifyArtist,
    SpotifyTrack,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from playtally.config.spotify import SpotifyConfig

RECENTLY_PLAYED_LIMIT = 50
SEVERAL_TRACKS_LIMIT = 50
SEVERAL_ARTISTS_LIMIT = 50


class SpotifyClient:
    """Small wrapper around spotipy.Spotify; spotipy owns the OAuth token lifecycle."""

    def __init__(self, *, config: SpotifyConfig, client: spotipy.Spotify | None = None) -> None:
        if client is None:
            auth_manager = SpotifyOAuth(
                client_id=config.client_id,
                client_secret=config.client_secret,
                redirect_uri=config.redirect_uri,
                scope=" ".join(config.scope),
                cache_path=config.cache_path,
            )
            client = spotipy.Spotify(auth_manager=auth_manager)
        self._client = client

    def recently_played(
        self,
        *,
        limit: int = RECENTLY_PLAYED_LIMIT,
        after: int | None = None,
    ) -> list[PlayHistoryItem]:
        """Return up to ``limit`` plays, newest first, as the API orders them."""

        raw_payload = self._client.current_user_recently_played(  # pyright: ignore[reportUnknownMemberType]
            limit=min(limit, RECENTLY_PLAYED_LIMIT), after=after
        )
        return RecentlyPlayedPage.model_validate(raw_payload).items

    def tracks(self, track_ids: Sequence[str]) -> list[SpotifyTrack]:
        """Look up catalogue tracks; ids Spotify does not know are left out."""

        if len(track_ids) > SEVERAL_TRACKS_LIMIT:
            raise ValueError(f"At most {SEVERAL_TRACKS_LIMIT} track ids per call")
        raw_payload = self._client.tracks(list(track_ids))  # pyright: ignore[reportUnknownMemberType]
        payload = SeveralTracksResponse.model_validate(raw_payload)
        return [track for track in payload.tracks if track is not None]

    def artists(self, artist_ids: Sequence[str]) -> list[SpotifyArtist]:
        if len(artist_ids) > SEVERAL_ARTISTS_LIMIT:
            raise ValueError(f"At most {SEVERAL_ARTISTS_LIMIT} artist ids per call")
        raw_payload = self._client.artists(list(artist_ids))  # pyright: ignore[reportUnknownMemberType]
        payload = SeveralArtistsResponse.model_validate(raw_payload)
        return [artist for artist in payload.artists if artist is not None]
