"""Public interface for the Ollama oracle adapter."""

from __future__ import annotations

from .client import OllamaClient, OracleTransport
from .prompt import build_prompt
from .resolver import OracleResolver
from .schema import DecisionPayload, GenerateRequest, GenerateResponse, TagsResponse
from .translator import extract_decision_payload, parse_decision

__all__ = [
    "DecisionPayload",
    "GenerateRequest",
    "GenerateResponse",
    "OllamaClient",
    "OracleResolver",
    "OracleTransport",
    "TagsResponse",
    "build_prompt",
    "extract_decision_payload",
    "parse_decision",
]
