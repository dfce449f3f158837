from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from social_insights.viz.common import save_figure


def plot_daily_counts(daily_counts: pd.DataFrame, output_path: Path, title: str) -> Path:
    dates = pd.to_datetime(daily_counts["date"], errors="coerce")
    plt.figure(figsize=(12, 4))
    plt.plot(dates, daily_counts["count"], marker="o", linewidth=1.5)
    plt.title(title)
    plt.xlabel("Date")
    plt.ylabel("Count")
    return save_figure(output_path)


def plot_trending_tags(trending_wide: pd.DataFrame, output_path: Path) -> Path | None:
    tag_columns = [column for column in trending_wide.columns if column != "date"]
    if trending_wide.empty or not tag_columns:
        return None
    dates = pd.to_datetime(trending_wide["date"], errors="coerce")
    plt.figure(figsize=(12, 4))
    for column in tag_columns:
        plt.plot(dates, trending_wide[column], linewidth=1.5, label=column)
    plt.title("Trending tags")
    plt.xlabel("Date")
    plt.ylabel("Photos tagged")
    plt.legend(loc="upper left")
    return save_figure(output_path)
