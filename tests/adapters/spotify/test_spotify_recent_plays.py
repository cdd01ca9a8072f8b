"""Recently-played fetching against a fake spotipy client."""

from __future__ import annotations

from datetime import UTC, datetime

from playtally.adapters.spotify import SpotifyClient, fetch_recent_plays
from playtally.config import SpotifyConfig

SpotifyPayload = dict[str, object]


def _item(track_id: str, name: str, played_at: str) -> SpotifyPayload:
    return {
        "track": {
            "id": track_id,
            "name": name,
            "duration_ms": 240_000,
            "popularity": 70,
            "album": {
                "id": "album-1",
                "name": "Abbey Road",
                "images": [{"url": "https://i.scdn.co/image/1", "height": 640, "width": 640}],
                "artists": [{"id": "beatles", "name": "The Beatles"}],
            },
            "artists": [{"id": "beatles", "name": "The Beatles"}],
            "external_urls": {"spotify": f"https://open.spotify.com/track/{track_id}"},
        },
        "played_at": played_at,
        "context": None,
    }


class FakeSpotipyClient:
    def __init__(self, payload: SpotifyPayload) -> None:
        self._payload = payload
        self.calls: list[tuple[int, int | None]] = []

    def current_user_recently_played(
        self, *, limit: int, after: int | None = None
    ) -> SpotifyPayload:
        self.calls.append((limit, after))
        return self._payload


def _config() -> SpotifyConfig:
    return SpotifyConfig(client_id="id", client_secret="secret", redirect_uri="http://localhost")


def test_fetch_recent_plays_returns_oldest_first() -> None:
    fake = FakeSpotipyClient(
        {
            "items": [
                _item("t2", "Something", "2024-05-01T10:05:00.000Z"),
                _item("t1", "Come Together", "2024-05-01T10:00:00.000Z"),
            ],
            "next": None,
            "cursors": {"after": "1714557900000", "before": "1714557600000"},
            "limit": 50,
        }
    )
    client = SpotifyClient(config=_config(), client=fake)  # type: ignore[arg-type]

    plays = fetch_recent_plays(config=_config(), client=client, limit=80)

    assert fake.calls == [(50, None)]
    assert [play.track.name for play in plays] == ["Come Together", "Something"]
    first = plays[0]
    assert first.event.played_at == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    assert first.event.ms_played == 240_000
    assert first.track.album_id == "album-1"
    assert first.track.primary_artist == "The Beatles"
    assert first.track.metadata.images[0].url == "https://i.scdn.co/image/1"
    assert first.track.metadata.external_urls["spotify"].endswith("/t1")


def test_empty_history_yields_no_plays() -> None:
    fake = FakeSpotipyClient({"items": []})
    client = SpotifyClient(config=_config(), client=fake)  # type: ignore[arg-type]

    assert fetch_recent_plays(config=_config(), client=client) == []
