from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from social_insights.config import DataConfig
from social_insights.io.schema import (
    REQUIRED_FIELDS,
    Comment,
    Dataset,
    EntityT,
    Follow,
    Like,
    Photo,
    PhotoTag,
    Tag,
    User,
    validate_records,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadReport:
    dataset: Dataset
    dropped_rows: dict[str, int] = field(default_factory=dict)
    missing_files: list[str] = field(default_factory=list)


def _entity_files(config: DataConfig) -> dict[str, tuple[type, str]]:
    return {
        "users": (User, config.users_file),
        "tags": (Tag, config.tags_file),
        "photos": (Photo, config.photos_file),
        "photo_tags": (PhotoTag, config.photo_tags_file),
        "likes": (Like, config.likes_file),
        "follows": (Follow, config.follows_file),
        "comments": (Comment, config.comments_file),
    }


def read_entity_csv(path: Path, entity_type: type[EntityT]) -> tuple[list[EntityT], int]:
    """Read one entity CSV and return (valid records, dropped row count)."""
    # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
    try:
        df = pd.read_csv(path, encoding="utf-8-sig", dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        LOGGER.warning("Entity file is empty: %s", path)
        return [], 0
    df = df.rename(columns=lambda column: str(column).strip())
    missing = [column for column in REQUIRED_FIELDS[entity_type] if column not in df.columns]
    if missing:
        missing_str = ", ".join(missing)
        raise ValueError(f"Missing required columns in {path.name}: {missing_str}")
    return validate_records(entity_type, df.to_dict(orient="records"))


def load_dataset(data_dir: Path, config: DataConfig | None = None) -> LoadReport:
    """Load all seven entity CSVs from ``data_dir`` into an immutable Dataset."""
    config = config or DataConfig()
    loaded: dict[str, tuple] = {}
    dropped_rows: dict[str, int] = {}
    missing_files: list[str] = []

    for name, (entity_type, file_name) in _entity_files(config).items():
        path = data_dir / file_name
        if not path.exists():
            LOGGER.warning("Entity file not found, loading empty %s: %s", name, path)
            missing_files.append(file_name)
            loaded[name] = ()
            dropped_rows[name] = 0
            continue
        records, dropped = read_entity_csv(path, entity_type)
        if dropped:
            LOGGER.info("Dropped %d invalid %s rows from %s", dropped, name, path.name)
        loaded[name] = tuple(records)
        dropped_rows[name] = dropped

    return LoadReport(
        dataset=Dataset(**loaded),
        dropped_rows=dropped_rows,
        missing_files=missing_files,
    )
