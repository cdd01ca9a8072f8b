from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from playtally.adapters.streaming_export import load_export_directory, read_export_file

if TYPE_CHECKING:
    from pathlib import Path


def _entry(ts: str, ms_played: int, **overrides: object) -> dict[str, object]:
    entry: dict[str, object] = {
        "ts": ts,
        "platform": "android",
        "ms_played": ms_played,
        "conn_country": "DE",
        "master_metadata_track_name": "Come Together",
        "master_metadata_album_artist_name": "The Beatles",
        "master_metadata_album_album_name": "Abbey Road",
        "spotify_track_uri": "spotify:track:2EqlS6tkEnglzr7tkKAAYD",
        "episode_name": None,
        "episode_show_name": None,
        "spotify_episode_uri": None,
        "skipped": False,
    }
    entry.update(overrides)
    return entry


def test_export_keeps_only_real_music_listens(tmp_path: Path) -> None:
    (tmp_path / "Streaming_History_Audio_2023_1.json").write_text(
        json.dumps(
            [
                _entry("2023-05-02T10:00:00Z", 180_000),
                _entry("2023-05-01T09:00:00Z", 9_000),
                _entry(
                    "2023-05-01T08:00:00Z",
                    900_000,
                    master_metadata_track_name=None,
                    spotify_track_uri=None,
                    episode_name="Episode 12",
                    episode_show_name="Some Podcast",
                    spotify_episode_uri="spotify:episode:abc",
                ),
            ]
        )
    )
    (tmp_path / "Streaming_History_Audio_2022.json").write_text(
        json.dumps([_entry("2022-12-31T23:59:00Z", 10_001)])
    )
    (tmp_path / "Streaming_History_Video_2023.json").write_text(
        json.dumps([_entry("2023-01-01T00:00:00Z", 50_000)])
    )

    plays = load_export_directory(tmp_path)

    assert [play.event.played_at for play in plays] == [
        datetime(2022, 12, 31, 23, 59, tzinfo=UTC),
        datetime(2023, 5, 2, 10, tzinfo=UTC),
    ]
    track = plays[0].track
    assert track.track_id == "2EqlS6tkEnglzr7tkKAAYD"
    assert track.artists == ("The Beatles",)
    assert track.album_name == "Abbey Road"
    assert plays[1].event.ms_played == 180_000


def test_read_export_file_parses_entries(tmp_path: Path) -> None:
    path = tmp_path / "Streaming_History_Audio_2024.json"
    path.write_text(json.dumps([_entry("2024-01-01T00:00:00Z", 20_000)]))

    (entry,) = read_export_file(path)

    assert entry.is_music
    assert entry.platform == "android"


def test_missing_export_files_raise(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_export_directory(tmp_path)
