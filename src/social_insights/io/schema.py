from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Iterable, Mapping, TypeVar

import pandas as pd

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    id: str
    username: str
    created_at: str = ""


@dataclass(frozen=True)
class Tag:
    id: str
    tag_name: str
    created_at: str = ""


@dataclass(frozen=True)
class Photo:
    id: str
    user_id: str
    image_url: str = ""
    # Source schema spells the creation column `created_dat`.
    created_dat: str = ""


@dataclass(frozen=True)
class PhotoTag:
    photo_id: str
    tag_id: str


@dataclass(frozen=True)
class Like:
    user_id: str
    photo_id: str
    created_at: str = ""


@dataclass(frozen=True)
class Follow:
    follower_id: str
    followee_id: str
    created_at: str = ""


@dataclass(frozen=True)
class Comment:
    id: str
    user_id: str
    photo_id: str
    comment_text: str = ""
    created_at: str = ""


@dataclass(frozen=True)
class Dataset:
    users: tuple[User, ...] = ()
    tags: tuple[Tag, ...] = ()
    photos: tuple[Photo, ...] = ()
    photo_tags: tuple[PhotoTag, ...] = ()
    likes: tuple[Like, ...] = ()
    follows: tuple[Follow, ...] = ()
    comments: tuple[Comment, ...] = ()

    def row_counts(self) -> dict[str, int]:
        return {field.name: len(getattr(self, field.name)) for field in fields(self)}


EntityT = TypeVar("EntityT", User, Tag, Photo, PhotoTag, Like, Follow, Comment)

REQUIRED_FIELDS: dict[type, tuple[str, ...]] = {
    User: ("id", "username"),
    Tag: ("id", "tag_name"),
    Photo: ("id", "user_id"),
    PhotoTag: ("photo_id", "tag_id"),
    Like: ("user_id", "photo_id"),
    Follow: ("follower_id", "followee_id"),
    Comment: ("id", "user_id", "photo_id"),
}


def entity_columns(entity_type: type) -> list[str]:
    return [field.name for field in fields(entity_type)]


def _clean_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def validate_record(entity_type: type[EntityT], raw: Mapping[str, Any]) -> EntityT | None:
    """Build an entity from a raw row, or None when a mandatory field is blank.

    Date columns are kept verbatim; parsing happens at aggregation time so an
    unparseable value only removes the row from date-bounded results.
    """
    values = {column: _clean_value(raw.get(column)) for column in entity_columns(entity_type)}
    if any(not values[column] for column in REQUIRED_FIELDS[entity_type]):
        return None
    return entity_type(**values)


def validate_records(
    entity_type: type[EntityT],
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[EntityT], int]:
    valid: list[EntityT] = []
    dropped = 0
    for row in rows:
        record = validate_record(entity_type, row)
        if record is None:
            dropped += 1
            continue
        valid.append(record)
    return valid, dropped


def coerce_record(entity_type: type[EntityT], item: Any) -> EntityT | None:
    """Accept an entity instance or a mapping with its fields; anything else is skipped."""
    if isinstance(item, entity_type):
        return item
    if isinstance(item, Mapping):
        record = validate_record(entity_type, item)
        if record is not None:
            return record
    LOGGER.warning("Skipping malformed %s record: %r", entity_type.__name__, item)
    return None


def iter_records(entity_type: type[EntityT], items: Iterable[Any] | None) -> list[EntityT]:
    if not items:
        return []
    coerced = (coerce_record(entity_type, item) for item in items)
    return [record for record in coerced if record is not None]
