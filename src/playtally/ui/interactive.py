"""Operator-driven resolver for ambiguous clusters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from playtally.domain.consolidation import Decision, most_played
from playtally.domain.model import ResolverPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from playtally.domain.consolidation import Cluster

_YES = frozenset({"y", "yes"})


def _print(message: str) -> None:
    print(message)  # noqa: T201


@dataclass(slots=True)
class InteractiveResolver:
    """Blocks on the operator for every cluster. No timeout."""

    ask: Callable[[str], str] = field(default=input)
    emit: Callable[[str], None] = field(default=_print)

    policy: ClassVar[ResolverPolicy] = ResolverPolicy.INTERACTIVE

    def resolve(self, cluster: Cluster) -> Decision:
        default = most_played(cluster)
        default_index = list(cluster).index(default) + 1

        self.emit("")
        self.emit(f"Artist: {cluster[0].attribution_name or 'unknown artist'}")
        for index, record in enumerate(cluster, start=1):
            self.emit(f"  {index}. {record.display_name} ({record.play_count} plays)")

        answer = self.ask("Consolidate these entries? [y/N] ").strip().lower()
        if answer not in _YES:
            return Decision(
                should_consolidate=False,
                confidence=1.0,
                canonical_name=cluster[0].display_name,
                reasoning="Kept separate by operator",
            )

        chosen = self._choose(cluster, default_index)
        return Decision(
            should_consolidate=True,
            confidence=1.0,
            canonical_name=cluster[chosen - 1].display_name,
            reasoning="Confirmed by operator",
        )

    def resolve_all(self, clusters: Sequence[Cluster]) -> list[Decision]:
        return [self.resolve(cluster) for cluster in clusters]

    def _choose(self, cluster: Cluster, default_index: int) -> int:
        prompt = f"Canonical name [1-{len(cluster)}, enter = {default_index}]: "
        while True:
            answer = self.ask(prompt).strip()
            if not answer:
                return default_index
            if answer.isdigit() and 1 <= int(answer) <= len(cluster):
                return int(answer)
            self.emit(f"Invalid choice {answer!r}")
