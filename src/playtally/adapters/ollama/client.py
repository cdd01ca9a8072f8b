"""HTTP client for a local Ollama server."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from playtally.adapters.http_resilience import ResilientClient
from playtally.config.ollama import DEFAULT_OLLAMA_URL, get_ollama_config
from playtally.domain.model import SourceUnavailableError

from .schema import GenerateOptions, GenerateRequest, GenerateResponse, TagsResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from playtally.config.http_resilience import ResilienceConfig
    from playtally.config.ollama import OllamaConfig

log = getLogger(__name__)

GENERATE_PATH = "/api/generate"
TAGS_PATH = "/api/tags"


class OracleTransport(Protocol):
    async def generate(self, prompt: str) -> str: ...


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class OllamaClient:
    config: OllamaConfig = field(default_factory=get_ollama_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def generate(self, prompt: str) -> str:
        """Return the completion text; transport problems become ``SourceUnavailableError``."""

        request = GenerateRequest(
            model=self.config.model,
            prompt=prompt,
            options=GenerateOptions(temperature=self.config.temperature, top_p=self.config.top_p),
        )
        async with self.client_factory(self.config.resilience) as client:
            try:
                response = await client.post(self._url(GENERATE_PATH), json=request.model_dump())
            except httpx.HTTPError as exc:
                raise SourceUnavailableError(f"Failed to query {self.config.model}: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise SourceUnavailableError(
                f"Ollama returned HTTP {response.status_code}", status_code=response.status_code
            )
        try:
            payload = GenerateResponse.model_validate_json(response.content)
        except PydanticValidationError as exc:
            raise SourceUnavailableError(f"Unexpected Ollama response: {exc}") from exc
        return payload.response

    async def list_models(self) -> list[str]:
        async with self.client_factory(self.config.resilience) as client:
            try:
                response = await client.get(self._url(TAGS_PATH))
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise SourceUnavailableError(f"Ollama is not reachable: {exc}") from exc
        return [tag.name for tag in TagsResponse.model_validate_json(response.content).models]

    async def is_available(self) -> bool:
        try:
            models = await self.list_models()
        except SourceUnavailableError as exc:
            log.warning(str(exc))
            return False
        if not any(name.split(":")[0] == self.config.model.split(":")[0] for name in models):
            log.warning(f"Model {self.config.model} is not pulled; available: {models}")
        return True

    def _url(self, path: str) -> str:
        base_url = self.config.resilience.base_url or DEFAULT_OLLAMA_URL
        return f"{base_url.rstrip('/')}{path}"
