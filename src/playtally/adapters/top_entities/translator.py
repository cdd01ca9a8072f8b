"""Translate top-entities payloads into raw records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError as PydanticValidationError

from playtally.domain.consolidation import EntityAdapter, validate_record
from playtally.domain.model import EntityKind, EntityMetadata, Image, RawRecord, ValidationError

from .schema import (
    ImagePayload,
    TopAlbumPayload,
    TopArtistPayload,
    TopEntitiesBaseModel,
    TopEntryPayload,
    TopSongPayload,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

PAYLOAD_MODELS: dict[EntityKind, type[TopEntryPayload]] = {
    EntityKind.SONG: TopSongPayload,
    EntityKind.ALBUM: TopAlbumPayload,
    EntityKind.ARTIST: TopArtistPayload,
}


def _images(payloads: Sequence[ImagePayload]) -> tuple[Image, ...]:
    return tuple(Image(url=item.url, height=item.height, width=item.width) for item in payloads)


def _attribution(name: str) -> str | None:
    return name or None


def _song_metadata(payload: TopSongPayload) -> EntityMetadata:
    return EntityMetadata(
        images=_images(payload.album.images),
        genres=tuple(payload.artist.genres),
        external_urls=dict(payload.track.external_urls),
    )


def _album_metadata(payload: TopAlbumPayload) -> EntityMetadata:
    return EntityMetadata(
        images=_images(payload.album.images),
        genres=tuple(payload.artist.genres),
        external_urls=dict(payload.album.external_urls),
    )


def _artist_metadata(payload: TopArtistPayload) -> EntityMetadata:
    return EntityMetadata(
        images=_images(payload.artist.images),
        genres=tuple(payload.artist.genres),
        external_urls=dict(payload.artist.external_urls),
    )


SONG_ADAPTER: EntityAdapter[TopSongPayload] = EntityAdapter(
    kind=EntityKind.SONG,
    id_of=lambda payload: payload.song_id,
    name_of=lambda payload: payload.track.name,
    attribution_of=lambda payload: _attribution(payload.artist.name),
    magnitude_of=lambda payload: payload.count,
    duration_of=lambda payload: payload.duration_ms,
    metadata_of=_song_metadata,
)

ALBUM_ADAPTER: EntityAdapter[TopAlbumPayload] = EntityAdapter(
    kind=EntityKind.ALBUM,
    id_of=lambda payload: payload.album_id,
    name_of=lambda payload: payload.album.name,
    attribution_of=lambda payload: _attribution(payload.artist.name),
    magnitude_of=lambda payload: payload.count,
    duration_of=lambda payload: payload.duration_ms,
    metadata_of=_album_metadata,
)

# Artists are their own attribution; they all share the unknown-artist partition.
ARTIST_ADAPTER: EntityAdapter[TopArtistPayload] = EntityAdapter(
    kind=EntityKind.ARTIST,
    id_of=lambda payload: payload.artist_id,
    name_of=lambda payload: payload.artist.name,
    attribution_of=lambda _payload: None,
    magnitude_of=lambda payload: payload.count,
    duration_of=lambda payload: payload.duration_ms,
    metadata_of=_artist_metadata,
)


def parse_payload(payload: object, kind: EntityKind) -> TopEntryPayload:
    """Validate one API item, raising the domain ``ValidationError`` on bad shapes."""

    model = PAYLOAD_MODELS[kind]
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError(f"Expected a JSON object for a {kind}, got {type(payload).__name__}")
    try:
        return model.model_validate(cast(Mapping[str, object], payload))
    except PydanticValidationError as exc:
        raise ValidationError(f"Malformed {kind} payload: {exc.error_count()} errors") from exc


def parse_raw_record(payload: object, kind: EntityKind) -> RawRecord:
    validated = parse_payload(payload, kind)
    match validated:
        case TopSongPayload():
            record = SONG_ADAPTER.to_record(validated)
        case TopAlbumPayload():
            record = ALBUM_ADAPTER.to_record(validated)
        case TopArtistPayload():
            record = ARTIST_ADAPTER.to_record(validated)
        case _:
            raise ValidationError(f"Unsupported payload type {type(validated).__name__}")
    return validate_record(record)


def dump_payload(payload: TopEntitiesBaseModel) -> dict[str, object]:
    return payload.model_dump(mode="json", by_alias=True)
