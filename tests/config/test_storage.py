from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest  # noqa: TC002

from playtally.config import StorageConfig, get_storage_config
from playtally.config.storage import HISTORY_DIRNAME, HTTP_CACHE_FILENAME
from playtally.domain.model import EntityKind


def test_get_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("PLAYTALLY_DATA_DIR", str(custom))

    config = get_storage_config()

    assert config.resolve_data_dir() == custom.resolve()


def test_snapshot_dir_is_created_on_demand(tmp_path: Path) -> None:
    config = StorageConfig(data_dir=tmp_path / "nested" / "data")

    assert not config.snapshot_dir(ensure=False).exists()
    assert config.snapshot_dir().is_dir()


def test_history_and_rules_live_in_their_own_directories(tmp_path: Path) -> None:
    config = StorageConfig(data_dir=tmp_path)

    history_dir = config.history_dir()
    rules_path = config.rules_path(EntityKind.SONG)

    assert history_dir == tmp_path.resolve() / HISTORY_DIRNAME
    assert history_dir.is_dir()
    assert rules_path.name == "song-consolidation-rules.json"
    assert rules_path.parent.is_dir()
    assert rules_path.parent != history_dir


def test_http_cache_path_uses_data_dir(tmp_path: Path) -> None:
    config = StorageConfig(data_dir=tmp_path / "cache-home")

    path = config.http_cache_path()

    assert path == (tmp_path / "cache-home").resolve() / HTTP_CACHE_FILENAME
    assert path.parent.exists()
