from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from playtally.adapters.snapshots import (
    HISTORY_PREFIX,
    SnapshotNotFoundError,
    fetch_prefix,
    leaderboard_prefix,
)
from playtally.adapters.top_entities import (
    FetchError,
    TopEntitiesFetchResult,
    parse_payload,
)
from playtally.config import ResilienceConfig, TopEntitiesConfig
from playtally.domain.consolidation import Decision, consolidate
from playtally.domain.history import build_history
from playtally.domain.model import (
    EntityKind,
    EquivalenceRule,
    RuleStore,
)
from tests.helpers.records import ScriptedResolver, abbey_road_records, make_play

if TYPE_CHECKING:
    from playtally.adapters.snapshots import SnapshotStore


def _fetch_config() -> TopEntitiesConfig:
    return TopEntitiesConfig(
        token="t",
        resilience=ResilienceConfig(name="test"),
        start="2020-01-01",
        end="2024-01-01",
        page_size=20,
    )


def test_latest_picks_highest_embedded_timestamp(snapshot_store: SnapshotStore) -> None:
    directory = snapshot_store.storage.snapshot_dir()
    for stamp in (1000, 30000, 200):
        (directory / f"clean-top-albums-{stamp}.json").write_text("{}")
    (directory / "clean-top-albums-latest.json").write_text("{}")
    (directory / "clean-top-songs-99999.json").write_text("{}")

    latest = snapshot_store.latest(leaderboard_prefix(EntityKind.ALBUM))

    assert latest.name == "clean-top-albums-30000.json"


def test_latest_raises_when_nothing_matches(snapshot_store: SnapshotStore) -> None:
    with pytest.raises(SnapshotNotFoundError):
        snapshot_store.latest(fetch_prefix(EntityKind.SONG))


def test_fetch_round_trip(snapshot_store: SnapshotStore) -> None:
    item = parse_payload(
        {"albumId": "a1", "count": 4, "album": {"name": "Help!"}, "artist": {"name": "X"}},
        EntityKind.ALBUM,
    )
    result = TopEntitiesFetchResult(
        kind=EntityKind.ALBUM,
        items=[item],
        errors=[FetchError(call=2, offset=20, message="HTTP 500", status_code=500)],
        calls_made=2,
    )

    path = snapshot_store.save_fetch(result, _fetch_config())
    loaded_path, records = snapshot_store.load_fetch_records(EntityKind.ALBUM)

    document = json.loads(path.read_text())
    assert loaded_path == path
    assert path.name.startswith("top-albums-")
    assert document["metadata"]["successfulCalls"] == 1
    assert document["metadata"]["failedCalls"] == 1
    assert document["albums"][0]["albumId"] == "a1"
    assert [(record.entity_id, record.play_count) for record in records] == [("a1", 4)]


def test_leaderboard_round_trip(snapshot_store: SnapshotStore) -> None:
    resolver = ScriptedResolver(
        Decision(should_consolidate=True, confidence=0.9, canonical_name="Abbey Road")
    )
    result = consolidate(abbey_road_records(), resolver=resolver)

    path = snapshot_store.save_leaderboard(EntityKind.ALBUM, result)
    _, entities = snapshot_store.load_leaderboard(EntityKind.ALBUM)

    document = json.loads(path.read_text())
    entry = document["albums"][0]
    assert entry["original_albumIds"] == ["a1", "a2", "a3"]
    assert entry["consolidated_count"] == 3
    assert document["metadata"]["duplicatesRemoved"] == 2
    (entity,) = entities
    assert entity.canonical_name == "Abbey Road"
    assert entity.play_count == 18
    assert entity.cumulative_duration_ms == 18_000
    assert entity.member_ids == ("a1", "a2", "a3")
    assert entity.rank == 1


def test_rules_round_trip(snapshot_store: SnapshotStore) -> None:
    rule = EquivalenceRule.from_names(
        attribution_name="The Beatles",
        canonical_name="Abbey Road",
        names=["Abbey Road", "Abbey Road (Remastered)"],
    )

    assert len(snapshot_store.load_rules(EntityKind.ALBUM)) == 0
    path = snapshot_store.save_rules(EntityKind.ALBUM, RuleStore((rule,)))
    loaded = snapshot_store.load_rules(EntityKind.ALBUM)

    assert path.name == "album-consolidation-rules.json"
    assert list(loaded) == [rule]
    assert len(snapshot_store.load_rules(EntityKind.SONG)) == 0


def test_rules_file_accepts_legacy_base_album_name(snapshot_store: SnapshotStore) -> None:
    path = snapshot_store.storage.rules_path(EntityKind.ALBUM)
    path.write_text(
        json.dumps(
            {
                "rules": [
                    {
                        "artistName": "Queen",
                        "baseAlbumName": "Innuendo",
                        "variations": ["Innuendo", "Innuendo (Deluxe)"],
                    }
                ]
            }
        )
    )

    (rule,) = snapshot_store.load_rules(EntityKind.ALBUM)

    assert rule.canonical_name == "Innuendo"
    assert rule.variants == ("innuendo", "innuendo (deluxe)")


def test_recent_plays_round_trip(snapshot_store: SnapshotStore) -> None:
    played_at = datetime(2024, 5, 1, 8, 30, tzinfo=UTC)
    plays = [make_play(played_at=played_at, genres=("rock",))]

    snapshot_store.save_recent_plays(plays, source="spotify")
    _, loaded = snapshot_store.load_recent_plays()

    (play,) = loaded
    assert play.event.played_at == played_at
    assert play.event.ms_played == 259_000
    assert play.track == plays[0].track


def test_history_round_trip(snapshot_store: SnapshotStore) -> None:
    plays = [
        make_play(played_at=datetime(2024, 1, day, tzinfo=UTC), ms_played=1_000)
        for day in (3, 1, 2)
    ]
    history = build_history(plays, source="export", now=datetime(2025, 1, 1, tzinfo=UTC))

    path = snapshot_store.save_history(history)
    _, loaded = snapshot_store.load_history()

    assert path.parent == snapshot_store.storage.history_dir()
    assert path.name.startswith(f"{HISTORY_PREFIX}-")
    (entity,) = loaded.entities
    assert entity.play_count == 3
    assert entity.cumulative_duration_ms == 3_000
    assert [event.played_at.day for event in entity.events] == [1, 2, 3]
    assert loaded.metadata.total_events == 3
    assert loaded.metadata.date_range.latest == datetime(2024, 1, 3, tzinfo=UTC)
    assert loaded.metadata.source == "export"
