"""Resolver that asks a language model to judge ambiguous clusters."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from playtally.config.consolidation import (
    DEFAULT_ORACLE_BATCH_PAUSE_SECONDS,
    DEFAULT_ORACLE_BATCH_SIZE,
    DEFAULT_RULE_EXAMPLES,
)
from playtally.domain.consolidation import fallback_decision
from playtally.domain.model import (
    EntityKind,
    MalformedOracleResponseError,
    ResolverPolicy,
    RuleStore,
    SourceUnavailableError,
)

from .prompt import build_prompt
from .translator import parse_decision

if TYPE_CHECKING:
    from collections.abc import Sequence

    from playtally.domain.consolidation import Cluster, Decision

    from .client import OracleTransport

log = getLogger(__name__)


@dataclass(slots=True)
class OracleResolver:
    """Queries the transport for each cluster, a few clusters at a time.

    A failed call or unusable answer turns into a keep-separate fallback decision for that
    cluster only; the rest of the batch is unaffected.
    """

    transport: OracleTransport
    rule_store: RuleStore = field(default_factory=RuleStore)
    kind: EntityKind = EntityKind.ALBUM
    batch_size: int = DEFAULT_ORACLE_BATCH_SIZE
    batch_pause_seconds: float = DEFAULT_ORACLE_BATCH_PAUSE_SECONDS
    rule_examples: int = DEFAULT_RULE_EXAMPLES

    policy: ClassVar[ResolverPolicy] = ResolverPolicy.ORACLE

    def resolve(self, cluster: Cluster) -> Decision:
        return asyncio.run(self.resolve_async(cluster))

    def resolve_all(self, clusters: Sequence[Cluster]) -> list[Decision]:
        return asyncio.run(self.resolve_all_async(clusters))

    async def resolve_async(self, cluster: Cluster) -> Decision:
        prompt = build_prompt(
            cluster, kind=self.kind, examples=self.rule_store.examples(self.rule_examples)
        )
        try:
            text = await self.transport.generate(prompt)
            decision = parse_decision(text)
        except (SourceUnavailableError, MalformedOracleResponseError) as exc:
            log.warning(f"Oracle failed for {cluster[0].display_name!r}: {exc}")
            return fallback_decision(cluster, f"Error in oracle analysis: {exc}")
        except Exception as exc:  # noqa: BLE001
            log.exception(f"Unexpected oracle error for {cluster[0].display_name!r}")
            return fallback_decision(cluster, f"Error in oracle analysis: {exc}")
        log.debug(
            f"{cluster[0].attribution_name}: {decision.should_consolidate} "
            f"({decision.confidence:.2f}) {decision.reasoning}"
        )
        return decision

    async def resolve_all_async(self, clusters: Sequence[Cluster]) -> list[Decision]:
        decisions: list[Decision] = []
        size = max(1, self.batch_size)
        batches = [clusters[start : start + size] for start in range(0, len(clusters), size)]
        for index, batch in enumerate(batches, start=1):
            log.info(f"Oracle batch {index}/{len(batches)} ({len(batch)} clusters)")
            decisions.extend(
                await asyncio.gather(*(self.resolve_async(cluster) for cluster in batch))
            )
            if index < len(batches) and self.batch_pause_seconds > 0:
                await asyncio.sleep(self.batch_pause_seconds)
        return decisions
