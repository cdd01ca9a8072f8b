from __future__ import annotations

from datetime import UTC, datetime

from playtally.domain.history import (
    build_history,
    find_resubmitted,
    history_records,
    merge_incoming,
)
from playtally.domain.model import (
    CompleteHistory,
    EntityKind,
    EquivalenceRule,
    RuleStore,
)
from tests.helpers.records import make_play

NOW = datetime(2025, 1, 1, tzinfo=UTC)


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 3, day, hour, tzinfo=UTC)


def test_disjoint_batches_sum_play_counts() -> None:
    first = [make_play(played_at=_at(1)), make_play("Something", played_at=_at(2))]
    second = [make_play(played_at=_at(3))]

    history = merge_incoming(CompleteHistory(), first, source="test", now=NOW)
    history = merge_incoming(history, second, now=NOW)

    counts = {entity.track.name: entity.play_count for entity in history.entities}
    assert counts == {"Come Together": 2, "Something": 1}
    assert history.metadata.total_events == 3
    assert history.metadata.total_entities == 2
    assert history.metadata.source == "test"


def test_resubmitting_a_batch_counts_it_twice() -> None:
    batch = [make_play(played_at=_at(1)), make_play(played_at=_at(2))]

    once = merge_incoming(CompleteHistory(), batch, now=NOW)
    twice = merge_incoming(once, batch, now=NOW)

    (entity,) = twice.entities
    assert entity.play_count == 4
    assert len(entity.events) == 4
    assert len(find_resubmitted(once, batch)) == 2


def test_merge_leaves_input_aggregate_untouched() -> None:
    original = merge_incoming(CompleteHistory(), [make_play(played_at=_at(1))], now=NOW)

    merged = merge_incoming(original, [make_play(played_at=_at(2))], now=NOW)

    assert original.entities[0].play_count == 1
    assert len(original.entities[0].events) == 1
    assert merged.entities[0].play_count == 2


def test_events_are_interleaved_chronologically() -> None:
    history = merge_incoming(
        CompleteHistory(),
        [make_play(played_at=_at(1)), make_play(played_at=_at(5))],
        now=NOW,
    )

    history = merge_incoming(history, [make_play(played_at=_at(3))], now=NOW)

    played = [event.played_at for event in history.entities[0].events]
    assert played == [_at(1), _at(3), _at(5)]


def test_metadata_tracks_date_range_and_listening_time() -> None:
    plays = [
        make_play(played_at=_at(4), ms_played=1_000),
        make_play("Octopus's Garden", played_at=_at(2), ms_played=2_000),
    ]

    history = build_history(plays, source="export", now=NOW)

    meta = history.metadata
    assert meta.date_range.earliest == _at(2)
    assert meta.date_range.latest == _at(4)
    assert meta.total_listening_ms == 3_000
    assert meta.generated_at == NOW
    assert [entity.track.name for entity in history.entities] == [
        "Octopus's Garden",
        "Come Together",
    ]


def test_merge_folds_tracks_through_song_rules() -> None:
    rule = EquivalenceRule.from_names(
        attribution_name="The Beatles",
        canonical_name="Come Together",
        names=["Come Together", "Come Together - 2019 Mix"],
    )
    plays = [
        make_play(played_at=_at(1)),
        make_play("Come Together - 2019 Mix", played_at=_at(2)),
    ]

    history = merge_incoming(CompleteHistory(), plays, rule_store=RuleStore((rule,)), now=NOW)

    (entity,) = history.entities
    assert entity.play_count == 2


def test_find_resubmitted_ignores_new_timestamps() -> None:
    history = merge_incoming(CompleteHistory(), [make_play(played_at=_at(1))], now=NOW)

    repeated = find_resubmitted(
        history, [make_play(played_at=_at(1)), make_play(played_at=_at(9))]
    )

    assert [play.event.played_at for play in repeated] == [_at(1)]


def test_history_records_per_kind() -> None:
    plays = [
        make_play("Come Together", played_at=_at(1), ms_played=100, genres=("rock",)),
        make_play("Come Together", played_at=_at(2), ms_played=100, genres=("rock",)),
        make_play("Something", played_at=_at(3), ms_played=50, genres=("pop",)),
        make_play(
            "Yesterday",
            played_at=_at(4),
            ms_played=10,
            album_id="help",
            album_name="Help!",
        ),
        make_play(
            "Loose Single",
            played_at=_at(5),
            ms_played=5,
            artist="Someone Else",
            album_id=None,
            album_name=None,
        ),
    ]
    history = build_history(plays, source="test", now=NOW)

    songs = history_records(history, EntityKind.SONG)
    albums = history_records(history, EntityKind.ALBUM)
    artists = history_records(history, EntityKind.ARTIST)

    assert [(record.display_name, record.play_count) for record in songs] == [
        ("Come Together", 2),
        ("Something", 1),
        ("Yesterday", 1),
        ("Loose Single", 1),
    ]
    assert [(record.display_name, record.play_count) for record in albums] == [
        ("Abbey Road", 3),
        ("Help!", 1),
    ]
    assert albums[0].cumulative_duration_ms == 250
    assert albums[0].attribution_name == "The Beatles"
    assert [(record.display_name, record.play_count) for record in artists] == [
        ("The Beatles", 4),
        ("Someone Else", 1),
    ]
    assert all(record.attribution_name is None for record in artists)
    assert artists[0].metadata.genres == ("rock", "pop")
    assert {record.kind for record in artists} == {EntityKind.ARTIST}
