"""Spotify adapter package."""

from __future__ import annotations

from .client import SpotifyClient
from .enrichment import TrackEnricher, enrich_plays
from .fetcher import fetch_recent_plays
from .schema import PlayHistoryItem, RecentlyPlayedPage, SpotifyAlbum, SpotifyArtist, SpotifyTrack
from .translator import translate_play, translate_track

__all__ = [
    "PlayHistoryItem",
    "RecentlyPlayedPage",
    "SpotifyAlbum",
    "SpotifyArtist",
    "SpotifyClient",
    "SpotifyTrack",
    "TrackEnricher",
    "enrich_plays",
    "fetch_recent_plays",
    "translate_play",
    "translate_track",
]
