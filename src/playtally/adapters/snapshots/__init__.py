"""JSON snapshot persistence."""

from __future__ import annotations

from .store import (
    HISTORY_PREFIX,
    RECENT_PLAYS_PREFIX,
    SnapshotNotFoundError,
    SnapshotStore,
    fetch_prefix,
    leaderboard_prefix,
)

__all__ = [
    "HISTORY_PREFIX",
    "RECENT_PLAYS_PREFIX",
    "SnapshotNotFoundError",
    "SnapshotStore",
    "fetch_prefix",
    "leaderboard_prefix",
]
