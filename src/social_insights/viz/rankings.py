from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from social_insights.viz.common import save_figure


def plot_ranking(
    ranking: pd.DataFrame,
    label_column: str,
    value_columns: list[str],
    output_path: Path,
    title: str,
) -> Path:
    """Horizontal bars, stacked when several value columns are given."""
    labels = ranking[label_column].astype(str)
    plt.figure(figsize=(10, 5))
    left = pd.Series(0, index=ranking.index, dtype="int64")
    for column in value_columns:
        plt.barh(labels, ranking[column], left=left, label=column)
        left = left + ranking[column]
    plt.gca().invert_yaxis()
    plt.title(title)
    plt.xlabel("Count")
    if len(value_columns) > 1:
        plt.legend(loc="lower right")
    return save_figure(output_path)
