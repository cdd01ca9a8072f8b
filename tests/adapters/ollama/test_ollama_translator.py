from __future__ import annotations

import pytest

from playtally.adapters.ollama import extract_decision_payload, parse_decision
from playtally.domain.model import MalformedOracleResponseError

VALID = (
    '{"shouldConsolidate": true, "confidence": 0.92, '
    '"canonicalName": "Abbey Road", "reasoning": "Remaster of the same album"}'
)


def test_parse_decision_reads_plain_json() -> None:
    decision = parse_decision(VALID)

    assert decision.should_consolidate is True
    assert decision.confidence == 0.92
    assert decision.canonical_name == "Abbey Road"
    assert decision.reasoning == "Remaster of the same album"


def test_parse_decision_finds_json_inside_prose_and_fences() -> None:
    text = f"Sure! Here is my analysis:\n```json\n{VALID}\n```\nHope that helps."

    assert parse_decision(text).canonical_name == "Abbey Road"


def test_parse_decision_skips_unrelated_objects() -> None:
    text = f'Context: {{"artist": "The Beatles"}} and a stray {{ brace. Answer: {VALID}'

    assert parse_decision(text).confidence == 0.92


def test_integer_confidence_is_accepted() -> None:
    payload = extract_decision_payload(
        '{"shouldConsolidate": false, "confidence": 0, "canonicalName": "x", "reasoning": ""}'
    )

    assert payload.confidence == 0.0


@pytest.mark.parametrize(
    "text",
    [
        "I think they are the same album.",
        "",
        '{"shouldConsolidate": "yes", "confidence": 0.9, "canonicalName": "x", "reasoning": ""}',
        '{"shouldConsolidate": true, "confidence": "0.9", "canonicalName": "x", "reasoning": ""}',
        '{"shouldConsolidate": true, "confidence": 1.4, "canonicalName": "x", "reasoning": ""}',
        '{"shouldConsolidate": true, "confidence": 0.9}',
        '{"shouldConsolidate": true, "confidence": 0.9, "canonicalName": "x"',
    ],
)
def test_unusable_responses_raise(text: str) -> None:
    with pytest.raises(MalformedOracleResponseError) as exc:
        parse_decision(text)

    assert exc.value.raw_response == text
