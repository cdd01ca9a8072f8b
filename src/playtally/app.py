"""Application orchestration entry points.

Each function loads its inputs from the snapshot store, calls into the pure domain core
and persists whatever was computed.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from playtally.adapters.ollama import OllamaClient, OracleResolver
from playtally.adapters.snapshots import SnapshotStore
from playtally.adapters.spotify import SpotifyClient, enrich_plays
from playtally.adapters.spotify import fetch_recent_plays as fetch_spotify_recent_plays
from playtally.adapters.streaming_export import load_export_directory
from playtally.adapters.top_entities import TopEntitiesFetcher
from playtally.config import (
    get_consolidation_config,
    get_ollama_config,
    get_spotify_config,
    get_top_entities_config,
)
from playtally.domain.consolidation import AutoResolver, consolidate
from playtally.domain.history import (
    build_history,
    find_resubmitted,
    history_records,
    merge_incoming,
)
from playtally.domain.model import EntityKind, ResolverPolicy
from playtally.domain.summary import rank_genres, summarize_by_attribution, summarize_decisions
from playtally.ui.interactive import InteractiveResolver

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path
    from playtally.config import ConsolidationConfig, SpotifyConfig
    from playtally.domain.consolidation import ConsolidationResult, Resolver
    from playtally.domain.model import CompleteHistory, RawRecord, RuleStore
    from playtally.domain.summary import AttributionSummary, DecisionSummary, GenreStanding

log = getLogger(__name__)

RECENT_PLAYS_SOURCE = "spotify-recently-played"
STREAMING_EXPORT_SOURCE = "spotify-extended-streaming-history"


@dataclass(frozen=True, slots=True)
class FetchReport:
    path: Path
    collected: int
    successful_calls: int
    calls_made: int


@dataclass(frozen=True, slots=True)
class CleanReport:
    kind: EntityKind
    result: ConsolidationResult
    decision_summary: DecisionSummary
    output_path: Path
    rules_path: Path | None


@dataclass(frozen=True, slots=True)
class MergeReport:
    path: Path
    history: CompleteHistory
    merged: int
    resubmitted: int


@dataclass(frozen=True, slots=True)
class LeaderboardSummary:
    path: Path
    attributions: list[AttributionSummary]
    genres: list[GenreStanding]


def fetch_top_entities(
    kind: EntityKind,
    *,
    fetcher: TopEntitiesFetcher | None = None,
    store: SnapshotStore | None = None,
    total_calls: int | None = None,
) -> FetchReport:
    active_fetcher = fetcher or TopEntitiesFetcher(config=get_top_entities_config())
    active_store = store or SnapshotStore()
    result = active_fetcher(kind, total_calls=total_calls)
    path = active_store.save_fetch(result, active_fetcher.config)
    if result.errors:
        log.warning(f"{len(result.errors)} fetch calls failed; partial results saved")
    return FetchReport(
        path=path,
        collected=len(result.items),
        successful_calls=result.successful_calls,
        calls_made=result.calls_made,
    )


def build_resolver(
    policy: ResolverPolicy,
    *,
    kind: EntityKind,
    rule_store: RuleStore,
    consolidation: ConsolidationConfig,
    ollama_model: str | None = None,
) -> Resolver:
    match policy:
        case ResolverPolicy.AUTO:
            return AutoResolver()
        case ResolverPolicy.INTERACTIVE:
            return InteractiveResolver()
        case ResolverPolicy.ORACLE:
            client = OllamaClient(config=get_ollama_config(model=ollama_model))
            if not asyncio.run(client.is_available()):
                log.warning("Oracle unavailable; ambiguous clusters will be kept separate")
            return OracleResolver(
                transport=client,
                rule_store=rule_store,
                kind=kind,
                batch_size=consolidation.oracle_batch_size,
                batch_pause_seconds=consolidation.oracle_batch_pause_seconds,
                rule_examples=consolidation.rule_examples,
            )


def clean_top_entities(
    kind: EntityKind,
    *,
    policy: ResolverPolicy = ResolverPolicy.AUTO,
    store: SnapshotStore | None = None,
    input_path: Path | None = None,
    resolver: Resolver | None = None,
    consolidation: ConsolidationConfig | None = None,
    ollama_model: str | None = None,
) -> CleanReport:
    """Consolidate the latest raw fetch of ``kind`` into a ranked leaderboard."""

    active_store = store or SnapshotStore()
    settings = consolidation or get_consolidation_config()
    source, records = active_store.load_fetch_records(kind, input_path)
    log.info(f"Loaded {len(records)} {kind.plural} from {source}")
    rule_store = active_store.load_rules(kind)
    active_resolver = resolver or build_resolver(
        policy,
        kind=kind,
        rule_store=rule_store,
        consolidation=settings,
        ollama_model=ollama_model,
    )
    return _consolidate_and_save(
        kind,
        records=records,
        rule_store=rule_store,
        resolver=active_resolver,
        settings=settings,
        store=active_store,
    )


def fetch_recent_plays(
    *,
    store: SnapshotStore | None = None,
    client: SpotifyClient | None = None,
    limit: int = 50,
) -> Path:
    active_store = store or SnapshotStore()
    plays = fetch_spotify_recent_plays(
        config=_spotify_config(active_store), client=client, limit=limit
    )
    return active_store.save_recent_plays(plays, source=RECENT_PLAYS_SOURCE)


def merge_recent_plays(
    *,
    store: SnapshotStore | None = None,
    recent_path: Path | None = None,
    history_path: Path | None = None,
) -> MergeReport:
    """Fold the latest recent-plays batch into the latest complete history."""

    active_store = store or SnapshotStore()
    recent_source, plays = active_store.load_recent_plays(recent_path)
    history_source, history = active_store.load_history(history_path)
    log.info(f"Merging {len(plays)} plays from {recent_source} into {history_source}")

    rule_store = active_store.load_rules(EntityKind.SONG)
    resubmitted = find_resubmitted(history, plays, rule_store=rule_store)
    if resubmitted:
        log.warning(
            f"{len(resubmitted)} of {len(plays)} plays are already in the history and will "
            f"be counted again"
        )
    merged = merge_incoming(history, plays, rule_store=rule_store)
    path = active_store.save_history(merged)
    return MergeReport(path=path, history=merged, merged=len(plays), resubmitted=len(resubmitted))


def import_streaming_export(
    directory: Path,
    *,
    store: SnapshotStore | None = None,
    enrich: bool = False,
    client: SpotifyClient | None = None,
) -> MergeReport:
    """Build a fresh complete history from a Spotify extended streaming history export.

    Export files only name tracks; with ``enrich`` (or an explicit ``client``) album ids,
    artwork, artist genres and durations are looked up from the Spotify catalogue first.
    """

    active_store = store or SnapshotStore()
    plays = load_export_directory(directory)
    if enrich or client is not None:
        active_client = client or SpotifyClient(config=_spotify_config(active_store))
        plays = enrich_plays(plays, client=active_client)
    history = build_history(
        plays,
        source=STREAMING_EXPORT_SOURCE,
        rule_store=active_store.load_rules(EntityKind.SONG),
    )
    path = active_store.save_history(history)
    return MergeReport(path=path, history=history, merged=len(plays), resubmitted=0)


def derive_leaderboards(
    kinds: Sequence[EntityKind] = tuple(EntityKind),
    *,
    policy: ResolverPolicy = ResolverPolicy.AUTO,
    store: SnapshotStore | None = None,
    history_path: Path | None = None,
    consolidation: ConsolidationConfig | None = None,
    resolver: Resolver | None = None,
    ollama_model: str | None = None,
) -> list[CleanReport]:
    """Re-derive top-N leaderboards from the complete history."""

    active_store = store or SnapshotStore()
    settings = consolidation or get_consolidation_config()
    source, history = active_store.load_history(history_path)
    log.info(f"Deriving {', '.join(kind.plural for kind in kinds)} from {source}")

    reports: list[CleanReport] = []
    for kind in kinds:
        rule_store = active_store.load_rules(kind)
        active_resolver = resolver or build_resolver(
            policy,
            kind=kind,
            rule_store=rule_store,
            consolidation=settings,
            ollama_model=ollama_model,
        )
        reports.append(
            _consolidate_and_save(
                kind,
                records=history_records(history, kind),
                rule_store=rule_store,
                resolver=active_resolver,
                settings=settings,
                store=active_store,
            )
        )
    return reports


def summarize_leaderboard(
    kind: EntityKind = EntityKind.ALBUM,
    *,
    store: SnapshotStore | None = None,
    path: Path | None = None,
    genre_limit: int | None = 20,
) -> LeaderboardSummary:
    active_store = store or SnapshotStore()
    source, entities = active_store.load_leaderboard(kind, path)
    return LeaderboardSummary(
        path=source,
        attributions=summarize_by_attribution(entities),
        genres=rank_genres(entities, limit=genre_limit),
    )


def _consolidate_and_save(
    kind: EntityKind,
    *,
    records: Sequence[RawRecord],
    rule_store: RuleStore,
    resolver: Resolver,
    settings: ConsolidationConfig,
    store: SnapshotStore,
) -> CleanReport:
    result = consolidate(
        records,
        rule_store=rule_store,
        resolver=resolver,
        confidence_threshold=settings.confidence_threshold,
        top_n=settings.top_n,
    )
    output_path = store.save_leaderboard(kind, result)
    rules_path = store.save_rules(kind, result.rule_store) if result.new_rules else None
    return CleanReport(
        kind=kind,
        result=result,
        decision_summary=summarize_decisions(
            result.decisions, review_threshold=settings.confidence_threshold
        ),
        output_path=output_path,
        rules_path=rules_path,
    )


def _spotify_config(store: SnapshotStore) -> SpotifyConfig:
    return get_spotify_config(cache_path=str(store.storage.ensure_data_dir() / ".cache"))
