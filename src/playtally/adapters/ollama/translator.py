"""Turn free-form model output into a ``Decision``."""

from __future__ import annotations

import json
from typing import cast

from pydantic import ValidationError as PydanticValidationError

from playtally.domain.consolidation import Decision
from playtally.domain.model import MalformedOracleResponseError

from .schema import DecisionPayload

_DECODER = json.JSONDecoder()


def extract_decision_payload(text: str) -> DecisionPayload:
    """Return the first JSON object embedded in ``text`` that validates as a decision.

    Models often wrap the object in prose or code fences, so every ``{`` is tried as a
    starting point.
    """

    problem = "no JSON object found"
    position = text.find("{")
    while position != -1:
        try:
            candidate, _end = _DECODER.raw_decode(text, position)
        except json.JSONDecodeError as exc:
            problem = f"invalid JSON: {exc.msg}"
        else:
            if isinstance(candidate, dict):
                try:
                    return DecisionPayload.model_validate(cast(dict[str, object], candidate))
                except PydanticValidationError as exc:
                    problem = f"wrong decision shape: {exc.error_count()} errors"
        position = text.find("{", position + 1)
    raise MalformedOracleResponseError(
        f"No usable decision in oracle response ({problem})", raw_response=text
    )


def parse_decision(text: str) -> Decision:
    payload = extract_decision_payload(text)
    return Decision(
        should_consolidate=payload.should_consolidate,
        confidence=payload.confidence,
        canonical_name=payload.canonical_name,
        reasoning=payload.reasoning,
    )
