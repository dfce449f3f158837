from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

TIME_RANGE_PRESETS = ("all", "7days", "30days", "90days", "1year")

TimeRangePreset = Literal["all", "7days", "30days", "90days", "1year"]


class DataConfig(BaseModel):
    data_dir: str = "data"
    users_file: str = "users.csv"
    tags_file: str = "tags.csv"
    photos_file: str = "photos.csv"
    photo_tags_file: str = "photo_tags.csv"
    likes_file: str = "likes.csv"
    follows_file: str = "follows.csv"
    comments_file: str = "comments.csv"


class TimeConfig(BaseModel):
    default_range: TimeRangePreset = "all"


class DisplayConfig(BaseModel):
    most_active_users: int = Field(default=5, ge=0)
    top_liked_photos: int = Field(default=5, ge=0)
    top_commented_photos: int = Field(default=5, ge=0)
    most_engaging_users: int = Field(default=5, ge=0)
    most_followed_users: int = Field(default=5, ge=0)
    most_used_tags: int = Field(default=7, ge=0)
    trending_tags: int = Field(default=3, ge=0)
    preference_users: int = Field(default=10, ge=0)
    preference_tags: int = Field(default=8, ge=0)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    figures_format: str = "png"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    data: DataConfig = Field(default_factory=DataConfig)
    time: TimeConfig = Field(default_factory=TimeConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    env_data_dir = os.getenv("SOCIAL_INSIGHTS_DATA_DIR")
    if env_data_dir:
        config.data.data_dir = str(Path(env_data_dir).resolve())
    else:
        config.data.data_dir = (
            _resolve_optional_path(config.data.data_dir, base_dir) or str(base_dir)
        )
    return config
