"""Spotify configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import require_env_vars

SPOTIFY_RECENTLY_PLAYED_SCOPES = ("user-read-recently-played",)


@dataclass(frozen=True)
class SpotifyConfig:
    client_id: str
    client_secret: str
    redirect_uri: str
    scope: tuple[str, ...] = field(default_factory=lambda: SPOTIFY_RECENTLY_PLAYED_SCOPES)
    cache_path: str | None = None


def get_spotify_config(*, cache_path: str | None = None) -> SpotifyConfig:
    values = require_env_vars(
        (
            "SPOTIFY_CLIENT_ID",
            "SPOTIFY_CLIENT_SECRET",
            "SPOTIFY_REDIRECT_URI",
        )
    )
    return SpotifyConfig(
        client_id=values["SPOTIFY_CLIENT_ID"],
        client_secret=values["SPOTIFY_CLIENT_SECRET"],
        redirect_uri=values["SPOTIFY_REDIRECT_URI"],
        cache_path=cache_path,
    )
