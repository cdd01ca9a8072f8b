"""Public interface for the top-entities statistics adapter."""

from __future__ import annotations

from .client import FetchError, TopEntitiesFetcher, TopEntitiesFetchResult
from .schema import TopAlbumPayload, TopArtistPayload, TopEntryPayload, TopSongPayload
from .translator import (
    ALBUM_ADAPTER,
    ARTIST_ADAPTER,
    SONG_ADAPTER,
    dump_payload,
    parse_payload,
    parse_raw_record,
)

__all__ = [
    "ALBUM_ADAPTER",
    "ARTIST_ADAPTER",
    "SONG_ADAPTER",
    "FetchError",
    "TopAlbumPayload",
    "TopArtistPayload",
    "TopEntitiesFetchResult",
    "TopEntitiesFetcher",
    "TopEntryPayload",
    "TopSongPayload",
    "dump_payload",
    "parse_payload",
    "parse_raw_record",
]
