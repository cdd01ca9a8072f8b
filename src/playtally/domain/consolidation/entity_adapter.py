"""Map source payloads of any shape onto raw records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from playtally.domain.model import EntityKind, EntityMetadata, RawRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


def _no_metadata(_payload: object) -> EntityMetadata:
    return EntityMetadata()


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityAdapter[T]:
    """Capability set the engine needs from a payload type.

    One instance exists per entity kind and payload source; the engine itself only ever
    sees the resulting ``RawRecord`` values.
    """

    kind: EntityKind
    id_of: Callable[[T], str]
    name_of: Callable[[T], str]
    attribution_of: Callable[[T], str | None]
    magnitude_of: Callable[[T], int]
    duration_of: Callable[[T], int]
    metadata_of: Callable[[T], EntityMetadata] = _no_metadata

    def to_record(self, payload: T) -> RawRecord:
        return RawRecord(
            entity_id=self.id_of(payload),
            display_name=self.name_of(payload),
            attribution_name=self.attribution_of(payload),
            play_count=self.magnitude_of(payload),
            cumulative_duration_ms=self.duration_of(payload),
            kind=self.kind,
            metadata=self.metadata_of(payload),
        )

    def to_records(self, payloads: Iterable[T]) -> list[RawRecord]:
        return [self.to_record(payload) for payload in payloads]
