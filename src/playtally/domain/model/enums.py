"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """What a leaderboard ranks."""

    SONG = "song"
    ALBUM = "album"
    ARTIST = "artist"

    @property
    def plural(self) -> str:
        return f"{self.value}s"


class ResolverPolicy(StrEnum):
    """Strategies for deciding ambiguous name clusters."""

    AUTO = "auto"
    INTERACTIVE = "interactive"
    ORACLE = "oracle"


class ConfidenceBand(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def for_confidence(cls, confidence: float) -> ConfidenceBand:
        if confidence >= 0.8:  # noqa: PLR2004
            return cls.HIGH
        if confidence >= 0.5:  # noqa: PLR2004
            return cls.MEDIUM
        return cls.LOW
