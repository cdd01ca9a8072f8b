"""Prompt template for asking a language model to judge a name cluster."""

from __future__ import annotations

from typing import TYPE_CHECKING

from playtally.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from playtally.domain.consolidation import Cluster
    from playtally.domain.model import EquivalenceRule

_INSTRUCTIONS = """You are a music data analyst. Decide whether these {plural} by one artist \
are the same {kind} listed under different names.

RULES:
- Identical names (case-insensitive): always consolidate, confidence 0.95 or higher.
- Minor variations (remastered, deluxe, explicit, anniversary, edition): consolidate, \
confidence 0.8 or higher.
- Different languages or different artists: never consolidate, confidence 0.1 or lower.
- Significantly different names: keep separate, confidence 0.2 or lower.

EXAMPLES OF ACCEPTED MERGES: {examples}

RESPONSE FORMAT (JSON only):
{{
  "shouldConsolidate": boolean,
  "confidence": number (0-1),
  "canonicalName": "string",
  "reasoning": "string"
}}

Be conservative. When uncertain, set a low confidence."""

_QUESTION = """ANALYZE THESE {plural_upper}:
Artist: "{artist}"
{plural_title}: {members}

Should these {plural} be consolidated? Answer in the required JSON format."""


def format_examples(rules: Sequence[EquivalenceRule]) -> str:
    if not rules:
        return "none yet"
    return ", ".join(
        f'"{rule.attribution_name}" - "{rule.canonical_name}" ({len(rule.variants)} variations)'
        for rule in rules
    )


def build_prompt(
    cluster: Cluster,
    *,
    kind: EntityKind = EntityKind.ALBUM,
    examples: Sequence[EquivalenceRule] = (),
) -> str:
    members = ", ".join(
        f'"{record.display_name}" ({record.play_count} plays)' for record in cluster
    )
    artist = cluster[0].attribution_name if cluster else None
    instructions = _INSTRUCTIONS.format(
        plural=kind.plural, kind=kind.value, examples=format_examples(examples)
    )
    question = _QUESTION.format(
        plural=kind.plural,
        plural_upper=kind.plural.upper(),
        plural_title=kind.plural.title(),
        artist=artist or "unknown artist",
        members=members,
    )
    return f"{instructions}\n\n{question}"
