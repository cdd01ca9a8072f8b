"""Pydantic models for the Ollama HTTP API and the decision payload it is asked for."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OllamaBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GenerateOptions(OllamaBaseModel):
    temperature: float
    top_p: float


class GenerateRequest(OllamaBaseModel):
    model: str
    prompt: str
    stream: bool = False
    options: GenerateOptions


class GenerateResponse(OllamaBaseModel):
    response: str
    model: str | None = None
    done: bool = True


class ModelTag(OllamaBaseModel):
    name: str
    size: int | None = None


class TagsResponse(OllamaBaseModel):
    models: list[ModelTag] = Field(default_factory=list)


class DecisionPayload(OllamaBaseModel):
    """The JSON object the model is instructed to answer with.

    Strict: ``"true"`` is not a boolean and ``"0.9"`` is not a number.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, strict=True)

    should_consolidate: bool = Field(alias="shouldConsolidate")
    confidence: float = Field(ge=0.0, le=1.0)
    canonical_name: str = Field(alias="canonicalName")
    reasoning: str
