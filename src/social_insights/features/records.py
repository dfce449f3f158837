from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar, Sequence

import pandas as pd


@dataclass(frozen=True)
class ResultRecord:
    """Base for aggregation outputs; ``to_dict`` emits the chart-facing field names."""

    wire_names: ClassVar[dict[str, str]] = {}

    def to_dict(self) -> dict[str, Any]:
        return {self.wire_names.get(key, key): value for key, value in asdict(self).items()}

    @classmethod
    def wire_columns(cls) -> list[str]:
        return [cls.wire_names.get(field.name, field.name) for field in fields(cls)]


@dataclass(frozen=True)
class DailyCount(ResultRecord):
    date: str
    count: int


@dataclass(frozen=True)
class ActiveUser(ResultRecord):
    username: str
    posts: int
    likes: int
    comments: int

    @property
    def score(self) -> int:
        return self.posts + self.likes + self.comments


@dataclass(frozen=True)
class LikedPhoto(ResultRecord):
    wire_names: ClassVar[dict[str, str]] = {"photo_id": "photoId"}

    photo_id: str
    username: str
    likes: int

    @property
    def score(self) -> int:
        return self.likes


@dataclass(frozen=True)
class CommentedPhoto(ResultRecord):
    wire_names: ClassVar[dict[str, str]] = {"photo_id": "photoId"}

    photo_id: str
    username: str
    comments: int

    @property
    def score(self) -> int:
        return self.comments


@dataclass(frozen=True)
class EngagingUser(ResultRecord):
    username: str
    likes: int
    comments: int

    @property
    def score(self) -> int:
        return self.likes + self.comments


@dataclass(frozen=True)
class FollowedUser(ResultRecord):
    username: str
    followers: int

    @property
    def score(self) -> int:
        return self.followers


@dataclass(frozen=True)
class TagUsage(ResultRecord):
    name: str
    count: int

    @property
    def score(self) -> int:
        return self.count


@dataclass(frozen=True)
class TagDayCounts(ResultRecord):
    wire_names: ClassVar[dict[str, str]] = {"tag_counts": "tagCounts"}

    date: str
    tag_counts: dict[str, int]


@dataclass(frozen=True)
class UserTagPreferences(ResultRecord):
    wire_names: ClassVar[dict[str, str]] = {"tag_preferences": "tagPreferences"}

    username: str
    tag_preferences: dict[str, int]

    @property
    def total(self) -> int:
        return sum(self.tag_preferences.values())


def records_to_frame(
    records: Sequence[ResultRecord],
    record_type: type[ResultRecord] | None = None,
) -> pd.DataFrame:
    """Tabulate aggregation output using its wire field names."""
    if not records:
        columns = record_type.wire_columns() if record_type is not None else []
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([record.to_dict() for record in records])
