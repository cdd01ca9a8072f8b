"""Paged fetcher for the top-entities statistics API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from playtally.adapters.http_resilience import ResilientClient
from playtally.config.top_entities import DEFAULT_TOP_API_URL, get_top_entities_config
from playtally.domain.model import ValidationError

from .translator import parse_payload

if TYPE_CHECKING:
    from collections.abc import Callable

    from playtally.config.http_resilience import ResilienceConfig
    from playtally.config.top_entities import TopEntitiesConfig
    from playtally.domain.model import EntityKind

    from .schema import TopEntryPayload

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(frozen=True, slots=True, kw_only=True)
class FetchError:
    """One page that could not be fetched; recorded rather than raised."""

    call: int
    offset: int
    message: str
    status_code: int | None = None


@dataclass(slots=True, kw_only=True)
class TopEntitiesFetchResult:
    kind: EntityKind
    items: list[TopEntryPayload] = field(default_factory=list["TopEntryPayload"])
    errors: list[FetchError] = field(default_factory=list["FetchError"])
    calls_made: int = 0

    @property
    def successful_calls(self) -> int:
        return self.calls_made - len(self.errors)


class _PageError(Exception):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class TopEntitiesFetcher:
    config: TopEntitiesConfig = field(default_factory=get_top_entities_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(
        self,
        kind: EntityKind,
        *,
        total_calls: int | None = None,
    ) -> TopEntitiesFetchResult:
        return asyncio.run(self.fetch_async(kind, total_calls=total_calls))

    async def fetch_async(
        self,
        kind: EntityKind,
        *,
        total_calls: int | None = None,
    ) -> TopEntitiesFetchResult:
        calls = total_calls if total_calls is not None else self.config.total_calls
        page_size = self.config.page_size
        result = TopEntitiesFetchResult(kind=kind)
        log.info(
            f"Fetching top {kind.plural}: up to {calls} calls of {page_size}, "
            f"{self.config.start} to {self.config.end}"
        )

        async with self.client_factory(self.config.resilience) as client:
            for call in range(1, calls + 1):
                offset = (call - 1) * page_size
                result.calls_made += 1
                try:
                    page = await self._fetch_page(client, kind=kind, offset=offset)
                except _PageError as exc:
                    log.warning(f"Call {call}/{calls} (offset {offset}) failed: {exc}")
                    result.errors.append(
                        FetchError(
                            call=call,
                            offset=offset,
                            message=str(exc),
                            status_code=exc.status_code,
                        )
                    )
                    continue

                result.items.extend(page)
                log.debug(f"Call {call}/{calls}: {len(page)} {kind.plural}")
                if len(page) < page_size:
                    log.info(f"Short page at offset {offset}; no more {kind.plural}")
                    break

        log.info(
            f"{result.successful_calls} of {result.calls_made} fetch calls succeeded, "
            f"{len(result.items)} {kind.plural} collected"
        )
        return result

    async def _fetch_page(
        self,
        client: ResilientClient,
        *,
        kind: EntityKind,
        offset: int,
    ) -> list[TopEntryPayload]:
        params = httpx.QueryParams(
            {
                "start": self.config.start,
                "end": self.config.end,
                "nb": self.config.page_size,
                "offset": offset,
            }
        )
        url = self._url_for(kind)
        try:
            response = await client.get(
                url, params=params, headers={"Cookie": f"token={self.config.token}"}
            )
        except httpx.HTTPError as exc:
            raise _PageError(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise _PageError(f"HTTP {response.status_code}", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise _PageError(f"Failed to parse JSON: {exc}") from exc
        if not isinstance(payload, list):
            raise _PageError(f"Expected a JSON array, got {type(payload).__name__}")

        try:
            return [parse_payload(item, kind) for item in payload]  # pyright: ignore[reportUnknownVariableType]
        except ValidationError as exc:
            raise _PageError(str(exc)) from exc

    def _url_for(self, kind: EntityKind) -> str:
        base_url = self.config.resilience.base_url or DEFAULT_TOP_API_URL
        return f"{base_url.rstrip('/')}/{kind.plural}"
