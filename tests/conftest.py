from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from playtally.adapters.snapshots import SnapshotStore
from playtally.config import StorageConfig

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@dataclass
class TickingClock:
    """Advances one second per call so consecutive snapshots never share a timestamp."""

    current: datetime = field(default_factory=lambda: datetime(2025, 9, 16, 12, tzinfo=UTC))

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.setenv("PLAYTALLY_DATA_DIR", str(tmp_path / "default-data"))
    for name in (
        "TOP_API_TOKEN",
        "TOP_API_URL",
        "TOP_API_BATCH_SIZE",
        "TOP_API_TOTAL_CALLS",
        "OLLAMA_URL",
        "OLLAMA_MODEL",
        "PLAYTALLY_TOP_N",
        "PLAYTALLY_CONFIDENCE_THRESHOLD",
        "PLAYTALLY_ORACLE_BATCH_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def storage_config(tmp_path: Path) -> StorageConfig:
    return StorageConfig(data_dir=tmp_path / "data")


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def snapshot_store(storage_config: StorageConfig, clock: TickingClock) -> SnapshotStore:
    return SnapshotStore(storage=storage_config, clock=clock)
