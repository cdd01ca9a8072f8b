"""Domain model for listening data and its consolidation."""

from __future__ import annotations

from .enums import ConfidenceBand, EntityKind, ResolverPolicy
from .errors import MalformedOracleResponseError, SourceUnavailableError, ValidationError
from .keys import UNKNOWN_ATTRIBUTION, GroupingKey, normalize_attribution, normalize_name
from .listening import (
    CompleteHistory,
    CompleteHistoryEntity,
    DateRange,
    HistoryMetadata,
    IncomingPlay,
    ListeningEvent,
    TrackInfo,
)
from .records import CanonicalEntity, EntityMetadata, Image, RawRecord
from .rules import EquivalenceRule, RuleStore

__all__ = [
    "UNKNOWN_ATTRIBUTION",
    "CanonicalEntity",
    "CompleteHistory",
    "CompleteHistoryEntity",
    "ConfidenceBand",
    "DateRange",
    "EntityKind",
    "EntityMetadata",
    "EquivalenceRule",
    "GroupingKey",
    "HistoryMetadata",
    "Image",
    "IncomingPlay",
    "ListeningEvent",
    "MalformedOracleResponseError",
    "RawRecord",
    "ResolverPolicy",
    "RuleStore",
    "SourceUnavailableError",
    "TrackInfo",
    "ValidationError",
    "normalize_attribution",
    "normalize_name",
]
