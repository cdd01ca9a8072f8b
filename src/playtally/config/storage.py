"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from playtally.domain.model import EntityKind

APP_DIR_NAME: Final[str] = "playtally"
HISTORY_DIRNAME: Final[str] = "complete-listening-history"
RULES_DIRNAME: Final[str] = "rules"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Layout of the snapshot directory tree.

    Leaderboards and recent-play batches live directly in ``data_dir``; the long-lived
    complete history and the equivalence rule files get their own subdirectories so a
    directory listing by prefix never mixes them up.
    """

    data_dir: Path
    http_cache_filename: str = HTTP_CACHE_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def snapshot_dir(self, *, ensure: bool = True) -> Path:
        return self.ensure_data_dir() if ensure else self.resolve_data_dir()

    def history_dir(self, *, ensure: bool = True) -> Path:
        path = self.resolve_data_dir() / HISTORY_DIRNAME
        if ensure:
            path.mkdir(parents=True, exist_ok=True)
        return path

    def rules_path(self, kind: EntityKind, *, ensure: bool = True) -> Path:
        path = self.resolve_data_dir() / RULES_DIRNAME
        if ensure:
            path.mkdir(parents=True, exist_ok=True)
        return path / f"{kind.value}-consolidation-rules.json"

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.http_cache_filename


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("PLAYTALLY_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)
