"""Reader for Spotify "Extended Streaming History" export files."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import BaseModel, ConfigDict, TypeAdapter

from playtally.domain.model import IncomingPlay, ListeningEvent, TrackInfo

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

log = getLogger(__name__)

EXPORT_GLOB: Final[str] = "Streaming_History_Audio_*.json"
TRACK_URI_PREFIX: Final[str] = "spotify:track:"
MIN_MS_PLAYED: Final[int] = 10_000


class StreamingHistoryEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ts: datetime
    ms_played: int
    platform: str | None = None
    master_metadata_track_name: str | None = None
    master_metadata_album_artist_name: str | None = None
    master_metadata_album_album_name: str | None = None
    spotify_track_uri: str | None = None
    episode_name: str | None = None
    episode_show_name: str | None = None
    spotify_episode_uri: str | None = None

    @property
    def is_music(self) -> bool:
        return (
            self.spotify_track_uri is not None
            and self.spotify_track_uri.startswith(TRACK_URI_PREFIX)
            and bool(self.master_metadata_track_name)
            and not self.episode_name
            and not self.episode_show_name
            and not self.spotify_episode_uri
        )

    @property
    def track_id(self) -> str:
        return (self.spotify_track_uri or "").removeprefix(TRACK_URI_PREFIX)


_ENTRIES = TypeAdapter(list[StreamingHistoryEntry])


def find_export_files(directory: Path) -> list[Path]:
    return sorted(directory.glob(EXPORT_GLOB))


def read_export_file(path: Path) -> list[StreamingHistoryEntry]:
    return _ENTRIES.validate_json(path.read_bytes())


def to_incoming_play(entry: StreamingHistoryEntry) -> IncomingPlay:
    artist = entry.master_metadata_album_artist_name
    return IncomingPlay(
        track=TrackInfo(
            track_id=entry.track_id,
            name=entry.master_metadata_track_name or "",
            artists=(artist,) if artist else (),
            album_name=entry.master_metadata_album_album_name,
        ),
        event=ListeningEvent(played_at=entry.ts, ms_played=entry.ms_played),
    )


def music_plays(entries: Iterable[StreamingHistoryEntry]) -> list[IncomingPlay]:
    """Keep only real music listens (no podcasts, no skips of ten seconds or less)."""

    return [
        to_incoming_play(entry)
        for entry in entries
        if entry.is_music and entry.ms_played > MIN_MS_PLAYED
    ]


def load_export_directory(directory: Path) -> list[IncomingPlay]:
    """Read every export file in ``directory``; plays come back in chronological order."""

    files = find_export_files(directory)
    if not files:
        raise FileNotFoundError(f"No {EXPORT_GLOB} files found in {directory}")

    plays: list[IncomingPlay] = []
    for path in files:
        entries = read_export_file(path)
        kept = music_plays(entries)
        log.info(f"{path.name}: kept {len(kept)} of {len(entries)} entries")
        plays.extend(kept)
    plays.sort(key=lambda play: play.event.played_at)
    return plays
