"""Text normalization primitives and the grouping key type."""

from __future__ import annotations

from typing import Final, NamedTuple

UNKNOWN_ATTRIBUTION: Final[str] = "unknown artist"


class GroupingKey(NamedTuple):
    """Bucket identity for records that fold into one canonical entity.

    Attribution is always the outer dimension, so two keys never compare equal across
    different artists.
    """

    attribution: str
    name: str

    def __str__(self) -> str:
        return f"{self.attribution}|||{self.name}"


def normalize_name(value: str | None) -> str:
    if value is None:
        return ""
    return value.strip().casefold()


def normalize_attribution(value: str | None) -> str:
    normalized = normalize_name(value)
    return normalized or UNKNOWN_ATTRIBUTION
