"""Grouping keys and the base-name heuristic used to find candidate duplicates."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from playtally.domain.model import GroupingKey, normalize_attribution, normalize_name

if TYPE_CHECKING:
    from playtally.domain.model import RuleStore

_PARENTHESIZED = re.compile(r"\s*\([^)]*\)")
_BRACKETED = re.compile(r"\s*\[[^\]]*\]")
_TRAILING_QUALIFIER = re.compile(
    r"\s*\b(?:super\s+deluxe|re-?mastered|re-mastret|remaster|deluxe|explicit|anniversary"
    r"|edition|version)\b.*$",
    re.IGNORECASE,
)
_DANGLING_SEPARATORS = " \t-–—:/,"


def build_grouping_key(
    attribution_name: str | None,
    display_name: str,
    rule_store: RuleStore | None = None,
) -> GroupingKey:
    """Return the key under which a record is folded.

    A rule listing the name for this attribution maps it onto the rule's canonical name;
    otherwise the normalized display name is the key.
    """

    attribution_key = normalize_attribution(attribution_name)
    name_key = normalize_name(display_name)
    if rule_store is not None:
        rule = rule_store.lookup(attribution_key, name_key)
        if rule is not None:
            return GroupingKey(attribution_key, rule.canonical_key)
    return GroupingKey(attribution_key, name_key)


def base_name(display_name: str) -> str:
    """Strip edition qualifiers so "Abbey Road (Remastered)" clusters with "Abbey Road"."""

    stripped = _PARENTHESIZED.sub("", display_name)
    stripped = _BRACKETED.sub("", stripped)
    stripped = _TRAILING_QUALIFIER.sub("", stripped)
    stripped = normalize_name(stripped).strip(_DANGLING_SEPARATORS)
    return stripped or normalize_name(display_name)


def cluster_key(attribution_name: str | None, display_name: str) -> GroupingKey:
    return GroupingKey(normalize_attribution(attribution_name), base_name(display_name))
