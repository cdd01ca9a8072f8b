from __future__ import annotations

from typing import TYPE_CHECKING

from playtally.domain.model import ResolverPolicy
from playtally.ui.interactive import InteractiveResolver
from tests.helpers.records import abbey_road_records

if TYPE_CHECKING:
    from collections.abc import Callable


def _scripted(answers: list[str]) -> tuple[Callable[[str], str], list[str]]:
    prompts: list[str] = []
    remaining = iter(answers)

    def ask(prompt: str) -> str:
        prompts.append(prompt)
        return next(remaining)

    return ask, prompts


def test_no_keeps_members_separate() -> None:
    ask, prompts = _scripted(["n"])
    output: list[str] = []
    resolver = InteractiveResolver(ask=ask, emit=output.append)

    decision = resolver.resolve(abbey_road_records())

    assert decision.should_consolidate is False
    assert decision.confidence == 1.0
    assert len(prompts) == 1
    assert "  2. Abbey Road (Remastered) (5 plays)" in output


def test_enter_picks_most_played_member() -> None:
    ask, _ = _scripted(["y", ""])
    resolver = InteractiveResolver(ask=ask, emit=lambda _message: None)

    decision = resolver.resolve(list(reversed(abbey_road_records())))

    assert decision.should_consolidate is True
    assert decision.canonical_name == "Abbey Road"
    assert decision.confidence == 1.0


def test_invalid_choice_is_asked_again() -> None:
    ask, prompts = _scripted(["YES", "7", "x", "2"])
    output: list[str] = []
    resolver = InteractiveResolver(ask=ask, emit=output.append)

    decision = resolver.resolve(abbey_road_records())

    assert decision.canonical_name == "Abbey Road (Remastered)"
    assert len(prompts) == 4
    assert "Invalid choice '7'" in output


def test_resolve_all_asks_once_per_cluster() -> None:
    ask, prompts = _scripted(["n", "n"])
    resolver = InteractiveResolver(ask=ask, emit=lambda _message: None)

    decisions = resolver.resolve_all([abbey_road_records(), abbey_road_records()])

    assert resolver.policy is ResolverPolicy.INTERACTIVE
    assert len(decisions) == 2
    assert len(prompts) == 2
