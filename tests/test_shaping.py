from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from social_insights.features.records import (
    DailyCount,
    FollowedUser,
    TagDayCounts,
    TagUsage,
    UserTagPreferences,
    records_to_frame,
)
from social_insights.viz.heatmaps import plot_tag_preference_heatmap
from social_insights.viz.rankings import plot_ranking
from social_insights.viz.shaping import (
    pivot_trending_tags,
    preference_matrix,
    select_top_tags,
    tag_shares,
    top_n,
    top_rows,
)
from social_insights.viz.time_series import plot_daily_counts, plot_trending_tags

TRENDING = [
    TagDayCounts(date="2024-01-01", tag_counts={"sunset": 2, "beach": 1}),
    TagDayCounts(date="2024-01-02", tag_counts={"food": 3}),
    TagDayCounts(date="2024-01-03", tag_counts={"beach": 1, "city": 1}),
]


def test_top_n_truncates_and_zero_means_all() -> None:
    rows = [FollowedUser(username=name, followers=0) for name in "abcdef"]

    assert [row.username for row in top_n(rows, 5)] == ["a", "b", "c", "d", "e"]
    assert top_n(rows, 0) == rows
    assert top_n(rows, 50) == rows

    table = pd.DataFrame({"username": list("abcdef"), "followers": range(6)})
    assert top_rows(table, 2)["username"].tolist() == ["a", "b"]
    assert len(top_rows(table, 0)) == 6
    assert len(top_rows(table, 50)) == 6


def test_select_top_tags_ranks_by_total_volume_with_stable_ties() -> None:
    assert select_top_tags(TRENDING, 3) == ["food", "sunset", "beach"]
    assert select_top_tags(TRENDING, 1) == ["food"]
    assert select_top_tags([], 3) == []


def test_pivot_trending_tags_zero_fills_missing_tags() -> None:
    wide = pivot_trending_tags(TRENDING, ["sunset", "food"])

    assert list(wide.columns) == ["date", "sunset", "food"]
    assert wide["sunset"].tolist() == [2, 0, 0]
    assert wide["food"].tolist() == [0, 3, 0]


def test_tag_shares_computes_percentages_outside_the_aggregator() -> None:
    shares = tag_shares([TagUsage(name="a", count=3), TagUsage(name="b", count=1)])
    assert shares["share"].tolist() == pytest.approx([75.0, 25.0])

    zero = tag_shares([TagUsage(name="a", count=0)])
    assert zero["share"].tolist() == [0.0]

    assert tag_shares([]).empty


def test_preference_matrix_limits_users_and_tags() -> None:
    preferences = [
        UserTagPreferences(username="alice", tag_preferences={"sunset": 3, "food": 1}),
        UserTagPreferences(username="bob", tag_preferences={"beach": 2}),
        UserTagPreferences(username="carol", tag_preferences={"city": 1}),
    ]

    matrix = preference_matrix(preferences, user_limit=2, tag_limit=2)

    assert list(matrix.index) == ["alice", "bob"]
    assert list(matrix.columns) == ["sunset", "beach"]
    assert matrix.loc["alice", "sunset"] == 3
    assert matrix.loc["bob", "sunset"] == 0


def test_records_to_frame_uses_wire_columns() -> None:
    frame = records_to_frame([DailyCount(date="2024-01-01", count=2)])
    assert frame.to_dict(orient="records") == [{"date": "2024-01-01", "count": 2}]

    empty = records_to_frame([], TagDayCounts)
    assert list(empty.columns) == ["date", "tagCounts"]


def test_chart_helpers_write_files(tmp_path: Path) -> None:
    daily = pd.DataFrame({"date": ["2024-01-01", "2024-01-02"], "count": [1, 4]})
    ranking = pd.DataFrame(
        {"username": ["alice", "bob"], "likes": [3, 1], "comments": [1, 0]}
    )

    assert plot_daily_counts(daily, tmp_path / "daily.png", "Daily").exists()
    assert plot_ranking(
        ranking, "username", ["likes", "comments"], tmp_path / "ranking.png", "Ranking"
    ).exists()

    wide = pivot_trending_tags(TRENDING, select_top_tags(TRENDING, 2))
    trending_path = plot_trending_tags(wide, tmp_path / "trending.png")
    assert trending_path is not None and trending_path.exists()

    matrix = preference_matrix(
        [UserTagPreferences(username="alice", tag_preferences={"sunset": 1})]
    )
    heatmap_path = plot_tag_preference_heatmap(matrix, tmp_path / "heatmap.png")
    assert heatmap_path is not None and heatmap_path.exists()


def test_chart_helpers_skip_empty_inputs(tmp_path: Path) -> None:
    assert plot_trending_tags(pivot_trending_tags([], []), tmp_path / "t.png") is None
    assert plot_tag_preference_heatmap(preference_matrix([]), tmp_path / "h.png") is None
