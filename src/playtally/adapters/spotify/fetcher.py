"""Recently-played importer."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .client import RECENTLY_PLAYED_LIMIT, SpotifyClient
from .translator import translate_play

if TYPE_CHECKING:
    from playtally.config.spotify import SpotifyConfig
    from playtally.domain.model import IncomingPlay

log = getLogger(__name__)


def fetch_recent_plays(
    *,
    config: SpotifyConfig,
    client: SpotifyClient | None = None,
    limit: int = RECENTLY_PLAYED_LIMIT,
) -> list[IncomingPlay]:
    """Fetch recent plays in chronological order, oldest first."""

    active_client = client or SpotifyClient(config=config)
    plays = [translate_play(item) for item in active_client.recently_played(limit=limit)]
    plays.sort(key=lambda play: play.event.played_at)
    log.info(f"Fetched {len(plays)} recent plays from Spotify")
    return plays
