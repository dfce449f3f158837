from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from social_insights.config import AppConfig
from social_insights.features.aggregates import (
    get_comments_over_time,
    get_follower_growth_over_time,
    get_most_active_users,
    get_most_engaging_users,
    get_most_followed_users,
    get_most_used_tags,
    get_new_users_over_time,
    get_photo_likes_trend,
    get_photos_over_time,
    get_top_commented_photos,
    get_top_liked_photos,
    get_trending_tags_over_time,
    get_user_preferences_by_tags,
)
from social_insights.features.records import (
    ActiveUser,
    CommentedPhoto,
    DailyCount,
    EngagingUser,
    FollowedUser,
    LikedPhoto,
    TagDayCounts,
    UserTagPreferences,
    records_to_frame,
)
from social_insights.io.read import load_dataset
from social_insights.io.schema import Dataset
from social_insights.io.write import write_summary, write_table
from social_insights.paths import build_output_paths
from social_insights.viz.heatmaps import plot_tag_preference_heatmap
from social_insights.viz.rankings import plot_ranking
from social_insights.viz.shaping import (
    pivot_trending_tags,
    preference_matrix,
    select_top_tags,
    tag_shares,
    top_rows,
)
from social_insights.viz.time_series import plot_daily_counts, plot_trending_tags

LOGGER = logging.getLogger(__name__)

DAILY_SERIES_TITLES = {
    "new_users_over_time": "New users per day",
    "photo_likes_trend": "Likes per day",
    "follower_growth_over_time": "New follows per day",
    "comments_over_time": "Comments per day",
    "photos_over_time": "Photos posted per day",
}

RANKING_FIGURES = (
    ("most_active_users", "username", ["posts", "likes", "comments"], "Most active users"),
    ("top_liked_photos", "photoId", ["likes"], "Top liked photos"),
    ("top_commented_photos", "photoId", ["comments"], "Top commented photos"),
    ("most_engaging_users", "username", ["likes", "comments"], "Most engaging users"),
    ("most_followed_users", "username", ["followers"], "Most followed users"),
    ("most_used_tags", "name", ["count"], "Most used tags"),
)


def _trending_long(trending: list[TagDayCounts]) -> pd.DataFrame:
    rows = [
        {"date": day.date, "tag_name": tag, "count": count}
        for day in trending
        for tag, count in day.tag_counts.items()
    ]
    return pd.DataFrame(rows, columns=["date", "tag_name", "count"])


def _preferences_long(preferences: list[UserTagPreferences]) -> pd.DataFrame:
    rows = [
        {"username": entry.username, "tag_name": tag, "count": count}
        for entry in preferences
        for tag, count in entry.tag_preferences.items()
    ]
    return pd.DataFrame(rows, columns=["username", "tag_name", "count"])


def compute_dashboard(
    dataset: Dataset,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict[str, list[Any]]:
    """Run every aggregation over ``dataset`` with the same date bounds."""
    return {
        "new_users_over_time": get_new_users_over_time(dataset.users, start, end),
        "photo_likes_trend": get_photo_likes_trend(dataset.likes, start, end),
        "follower_growth_over_time": get_follower_growth_over_time(dataset.follows, start, end),
        "comments_over_time": get_comments_over_time(dataset.comments, start, end),
        "photos_over_time": get_photos_over_time(dataset.photos, start, end),
        "most_active_users": get_most_active_users(
            dataset.users, dataset.photos, dataset.likes, dataset.comments, start, end
        ),
        "top_liked_photos": get_top_liked_photos(
            dataset.photos, dataset.likes, dataset.users, start, end
        ),
        "top_commented_photos": get_top_commented_photos(
            dataset.photos, dataset.comments, dataset.users, start, end
        ),
        "most_engaging_users": get_most_engaging_users(
            dataset.users, dataset.photos, dataset.likes, dataset.comments, start, end
        ),
        "most_followed_users": get_most_followed_users(
            dataset.users, dataset.follows, start, end
        ),
        "most_used_tags": get_most_used_tags(
            dataset.tags, dataset.photo_tags, dataset.photos, start, end
        ),
        "trending_tags_over_time": get_trending_tags_over_time(
            dataset.tags, dataset.photo_tags, dataset.photos, start, end
        ),
        "user_preferences_by_tags": get_user_preferences_by_tags(
            dataset.users, dataset.photos, dataset.photo_tags, dataset.tags, start, end
        ),
    }


def _build_tables(results: dict[str, list[Any]]) -> dict[str, pd.DataFrame]:
    tables: dict[str, pd.DataFrame] = {
        name: records_to_frame(results[name], DailyCount) for name in DAILY_SERIES_TITLES
    }
    tables["most_active_users"] = records_to_frame(results["most_active_users"], ActiveUser)
    tables["top_liked_photos"] = records_to_frame(results["top_liked_photos"], LikedPhoto)
    tables["top_commented_photos"] = records_to_frame(
        results["top_commented_photos"], CommentedPhoto
    )
    tables["most_engaging_users"] = records_to_frame(
        results["most_engaging_users"], EngagingUser
    )
    tables["most_followed_users"] = records_to_frame(
        results["most_followed_users"], FollowedUser
    )
    tables["most_used_tags"] = tag_shares(results["most_used_tags"])
    tables["trending_tags_over_time"] = _trending_long(results["trending_tags_over_time"])
    tables["user_preferences_by_tags"] = _preferences_long(results["user_preferences_by_tags"])
    return tables


def _render_dashboard_figures(
    results: dict[str, list[Any]],
    tables: dict[str, pd.DataFrame],
    figures_dir: Path,
    config: AppConfig,
) -> list[str]:
    suffix = config.outputs.figures_format
    display = config.display
    rendered: list[str] = []

    try:
        for name, title in DAILY_SERIES_TITLES.items():
            if not tables[name].empty:
                plot_daily_counts(tables[name], figures_dir / f"{name}.{suffix}", title)
                rendered.append(name)

        for name, label_column, value_columns, title in RANKING_FIGURES:
            limit = getattr(display, name)
            ranking = tables[name]
            if ranking.empty:
                continue
            output_path = figures_dir / f"{name}.{suffix}"
            plot_ranking(top_rows(ranking, limit), label_column, value_columns, output_path, title)
            rendered.append(name)

        trending = results["trending_tags_over_time"]
        top_tags = select_top_tags(trending, display.trending_tags)
        if plot_trending_tags(
            pivot_trending_tags(trending, top_tags),
            figures_dir / f"trending_tags_over_time.{suffix}",
        ):
            rendered.append("trending_tags_over_time")

        matrix = preference_matrix(
            results["user_preferences_by_tags"],
            user_limit=display.preference_users,
            tag_limit=display.preference_tags,
        )
        if plot_tag_preference_heatmap(matrix, figures_dir / f"user_preferences_by_tags.{suffix}"):
            rendered.append("user_preferences_by_tags")
    except Exception:  # pragma: no cover
        LOGGER.exception("Failed rendering one or more dashboard figures")
    return rendered


def build_dashboard_artifacts(
    data_dir: Path,
    out_dir: Path,
    config: AppConfig,
    start: datetime | None = None,
    end: datetime | None = None,
    *,
    render_figures: bool = True,
) -> dict[str, pd.DataFrame]:
    """Load the CSV dataset, compute every aggregate, and write tables/summary/figures."""
    paths = build_output_paths(out_dir)
    report = load_dataset(data_dir, config.data)
    results = compute_dashboard(report.dataset, start, end)
    tables = _build_tables(results)

    fmt = config.outputs.tables_format
    for name, table in tables.items():
        write_table(table, paths.tables / f"{name}.{fmt}", fmt=fmt)

    figures = (
        _render_dashboard_figures(results, tables, paths.figures, config) if render_figures else []
    )
    summary = {
        "data_dir": str(data_dir),
        "range_start": start.isoformat() if start else None,
        "range_end": end.isoformat() if end else None,
        "entity_rows": report.dataset.row_counts(),
        "dropped_rows": report.dropped_rows,
        "missing_files": report.missing_files,
        "table_rows": {name: int(len(table)) for name, table in tables.items()},
        "figures": figures,
    }
    write_summary(summary, paths.summary / "dashboard_summary.json")
    LOGGER.info("Wrote %d dashboard tables to %s", len(tables), paths.tables)
    return tables
