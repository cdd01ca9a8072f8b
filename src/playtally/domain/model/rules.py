"""Persistent name-equivalence rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .keys import normalize_attribution, normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(frozen=True, slots=True, kw_only=True)
class EquivalenceRule:
    """Declares that several display names by one artist denote the same entity."""

    attribution_name: str
    canonical_name: str
    variants: tuple[str, ...]

    @classmethod
    def from_names(
        cls,
        *,
        attribution_name: str | None,
        canonical_name: str,
        names: Iterable[str],
    ) -> EquivalenceRule:
        variants = tuple(dict.fromkeys(normalize_name(name) for name in names))
        return cls(
            attribution_name=attribution_name or "",
            canonical_name=canonical_name,
            variants=variants,
        )

    @property
    def attribution_key(self) -> str:
        return normalize_attribution(self.attribution_name)

    @property
    def canonical_key(self) -> str:
        return normalize_name(self.canonical_name)

    def covers(self, name_key: str) -> bool:
        return name_key in self.variants


@dataclass(frozen=True, slots=True)
class RuleStore:
    """Append-only, immutable collection of equivalence rules.

    Lookup is by normalized attribution first; within an attribution the first rule in
    insertion order that lists the name wins.
    """

    rules: tuple[EquivalenceRule, ...] = ()
    _by_attribution: dict[str, tuple[EquivalenceRule, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index: dict[str, list[EquivalenceRule]] = {}
        for rule in self.rules:
            index.setdefault(rule.attribution_key, []).append(rule)
        object.__setattr__(
            self, "_by_attribution", {key: tuple(value) for key, value in index.items()}
        )

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[EquivalenceRule]:
        return iter(self.rules)

    def with_rule(self, rule: EquivalenceRule) -> RuleStore:
        return RuleStore((*self.rules, rule))

    def with_rules(self, rules: Iterable[EquivalenceRule]) -> RuleStore:
        return RuleStore((*self.rules, *rules))

    def lookup(self, attribution_key: str, name_key: str) -> EquivalenceRule | None:
        for rule in self._by_attribution.get(attribution_key, ()):
            if rule.covers(name_key):
                return rule
        return None

    def for_attribution(self, attribution_key: str) -> tuple[EquivalenceRule, ...]:
        return self._by_attribution.get(attribution_key, ())

    def examples(self, limit: int) -> tuple[EquivalenceRule, ...]:
        return self.rules[:limit]
