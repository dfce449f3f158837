from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from social_insights.viz.common import save_figure


def plot_tag_preference_heatmap(matrix: pd.DataFrame, output_path: Path) -> Path | None:
    if matrix.empty:
        return None
    values = matrix.to_numpy(dtype=float)
    plt.figure(figsize=(max(6, 0.8 * matrix.shape[1] + 3), max(3, 0.4 * matrix.shape[0] + 2)))
    plt.imshow(values, aspect="auto", cmap="Blues")
    plt.colorbar(label="Photos tagged")
    plt.xticks(np.arange(matrix.shape[1]), matrix.columns, rotation=45, ha="right")
    plt.yticks(np.arange(matrix.shape[0]), matrix.index)
    plt.title("User tag preferences")
    return save_figure(output_path)
