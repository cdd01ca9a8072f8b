"""Fill in catalogue data for plays that only carry names and a track URI."""

from __future__ import annotations

from dataclasses import replace
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING

from spotipy import SpotifyException

from .client import SEVERAL_ARTISTS_LIMIT, SEVERAL_TRACKS_LIMIT
from .translator import translate_track

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from playtally.domain.model import IncomingPlay, TrackInfo

    from .client import SpotifyClient
    from .schema import SpotifyTrack

log = getLogger(__name__)


class TrackEnricher:
    """Look up album, artwork, genres and duration for track ids.

    Every answer is cached per track id for the lifetime of the enricher, so each id is
    requested at most once. A failed batch is logged and its plays keep their export data.
    """

    def __init__(self, client: SpotifyClient) -> None:
        self._client = client
        self._tracks: dict[str, TrackInfo] = {}
        self._genres: dict[str, tuple[str, ...]] = {}
        self.api_calls = 0
        self.failed_batches = 0

    def lookup(self, track_ids: Iterable[str]) -> dict[str, TrackInfo]:
        wanted = [track_id for track_id in dict.fromkeys(track_ids) if track_id]
        missing = [track_id for track_id in wanted if track_id not in self._tracks]
        for batch in batched(missing, SEVERAL_TRACKS_LIMIT):
            self._fetch_batch(batch)
        return {track_id: self._tracks[track_id] for track_id in wanted if track_id in self._tracks}

    def enrich(self, plays: Sequence[IncomingPlay]) -> list[IncomingPlay]:
        found = self.lookup(play.track.track_id for play in plays)
        log.info(f"Enriched {len(found)} tracks with {self.api_calls} Spotify calls")
        return [
            replace(play, track=_merge(play.track, found[play.track.track_id]))
            if play.track.track_id in found
            else play
            for play in plays
        ]

    def _fetch_batch(self, track_ids: tuple[str, ...]) -> None:
        try:
            tracks = self._client.tracks(track_ids)
            self.api_calls += 1
            self._load_genres(_primary_artist_ids(tracks))
        except SpotifyException as exc:
            self.failed_batches += 1
            log.warning(f"Track lookup failed for {len(track_ids)} ids: {exc}")
            return
        for track in tracks:
            primary = track.artists[0].id if track.artists else None
            genres = self._genres.get(primary, ()) if primary else ()
            self._tracks[track.id] = translate_track(track, genres=genres)

    def _load_genres(self, artist_ids: Iterable[str]) -> None:
        missing = [artist_id for artist_id in artist_ids if artist_id not in self._genres]
        for batch in batched(missing, SEVERAL_ARTISTS_LIMIT):
            artists = self._client.artists(batch)
            self.api_calls += 1
            for artist in artists:
                if artist.id is not None:
                    self._genres[artist.id] = tuple(artist.genres)


def enrich_plays(plays: Sequence[IncomingPlay], *, client: SpotifyClient) -> list[IncomingPlay]:
    return TrackEnricher(client).enrich(plays)


def _primary_artist_ids(tracks: Iterable[SpotifyTrack]) -> list[str]:
    ids = (track.artists[0].id for track in tracks if track.artists)
    return list(dict.fromkeys(artist_id for artist_id in ids if artist_id))


def _merge(exported: TrackInfo, catalogue: TrackInfo) -> TrackInfo:
    # Name and artists stay as exported so history grouping keys do not move.
    return replace(
        catalogue,
        name=exported.name,
        artists=exported.artists or catalogue.artists,
        album_name=catalogue.album_name or exported.album_name,
    )
