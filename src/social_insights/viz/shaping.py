from __future__ import annotations

from typing import Sequence, TypeVar

import pandas as pd

from social_insights.features.records import TagDayCounts, TagUsage, UserTagPreferences

RecordT = TypeVar("RecordT")


def _limit_slice(limit: int) -> slice:
    # A non-positive limit means all rows.
    return slice(None) if limit <= 0 else slice(limit)


def top_n(records: Sequence[RecordT], limit: int) -> list[RecordT]:
    """First ``limit`` rows of a ranking; a non-positive limit means all rows."""
    return list(records[_limit_slice(limit)])


def top_rows(table: pd.DataFrame, limit: int) -> pd.DataFrame:
    return table.iloc[_limit_slice(limit)]


def _rank_totals(totals: dict[str, int], count: int) -> list[str]:
    # dicts keep first-seen order and sorted() is stable, so ties stay in that order.
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [name for name, _total in top_n(ranked, count)]


def select_top_tags(trending: Sequence[TagDayCounts], count: int = 3) -> list[str]:
    totals: dict[str, int] = {}
    for day in trending:
        for tag, tag_count in day.tag_counts.items():
            totals[tag] = totals.get(tag, 0) + tag_count
    return _rank_totals(totals, count)


def pivot_trending_tags(trending: Sequence[TagDayCounts], tag_names: Sequence[str]) -> pd.DataFrame:
    """One row per day with a zero-filled column per requested tag."""
    rows = [
        {"date": day.date, **{tag: int(day.tag_counts.get(tag, 0)) for tag in tag_names}}
        for day in trending
    ]
    return pd.DataFrame(rows, columns=["date", *tag_names])


def tag_shares(tag_usage: Sequence[TagUsage]) -> pd.DataFrame:
    frame = pd.DataFrame(
        {
            "name": [usage.name for usage in tag_usage],
            "count": [usage.count for usage in tag_usage],
        }
    )
    total = int(frame["count"].sum()) if not frame.empty else 0
    frame["share"] = (frame["count"] / total * 100.0) if total > 0 else 0.0
    return frame


def preference_matrix(
    preferences: Sequence[UserTagPreferences],
    user_limit: int = 10,
    tag_limit: int = 8,
) -> pd.DataFrame:
    """Users x tags count grid for the heatmap, restricted to the heaviest tags."""
    selected = top_n(preferences, user_limit)
    totals: dict[str, int] = {}
    for entry in selected:
        for tag, tag_count in entry.tag_preferences.items():
            totals[tag] = totals.get(tag, 0) + tag_count
    tags = _rank_totals(totals, tag_limit)

    matrix = pd.DataFrame(
        [[entry.tag_preferences.get(tag, 0) for tag in tags] for entry in selected],
        index=[entry.username for entry in selected],
        columns=tags,
        dtype="int64",
    )
    matrix.index.name = "username"
    return matrix
