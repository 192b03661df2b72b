"""Descriptive plots of the sales dataset.

All functions return the :class:`matplotlib.figure.Figure` they draw and
never modify the input frame; :func:`save_figure` writes a figure to disk
and closes it.
"""

import logging
import os
from pathlib import Path
from typing import Union

os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

logger = logging.getLogger(__name__)


def save_figure(fig: Figure, out_dir: Union[str, Path], name: str, dpi: int = 150) -> Path:
    """Save ``fig`` as ``<out_dir>/<name>.png`` and close it.

    Returns:
        Path of the written file.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{name}.png"
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved figure: %s", path)
    return path


def plot_price_distribution(
    df: pd.DataFrame,
    target: str = "sale_price",
    log_base: float = 10,
    bins: int = 50,
) -> Figure:
    """Histogram of the target on its raw and log scales, side by side."""
    prices = df[target].astype(float)
    fig, (ax_raw, ax_log) = plt.subplots(1, 2, figsize=(12, 4.5))

    sns.histplot(prices, bins=bins, ax=ax_raw, color="steelblue")
    ax_raw.set_title("Sale price")
    ax_raw.set_xlabel(target)

    sns.histplot(np.log(prices) / np.log(log_base), bins=bins, ax=ax_log, color="darkorange")
    ax_log.set_title(f"log{log_base:g}(sale price)")
    ax_log.set_xlabel(f"log{log_base:g}({target})")

    fig.suptitle(f"Distribution of {len(prices):,} sale prices")
    fig.tight_layout()
    return fig


def plot_neighborhood_counts(df: pd.DataFrame, column: str = "neighborhood") -> Figure:
    """Horizontal bar chart of sales per neighbourhood, most frequent first."""
    counts = df[column].value_counts()
    fig, ax = plt.subplots(figsize=(8, max(4, 0.3 * len(counts))))
    sns.barplot(x=counts.values, y=counts.index.astype(str), ax=ax, color="steelblue")
    ax.set_xlabel("Number of sales")
    ax.set_ylabel("")
    ax.set_title("Sales by neighbourhood")
    fig.tight_layout()
    return fig


def plot_price_by_neighborhood(
    df: pd.DataFrame,
    target: str = "sale_price",
    column: str = "neighborhood",
) -> Figure:
    """Boxplot of sale price per neighbourhood, ordered by median price."""
    order = (
        df.groupby(column)[target].median().sort_values(ascending=False).index.astype(str)
    )
    plot_df = pd.DataFrame({column: df[column].astype(str), target: df[target].astype(float)})
    fig, ax = plt.subplots(figsize=(8, max(4, 0.3 * len(order))))
    sns.boxplot(data=plot_df, x=target, y=column, order=list(order), ax=ax, color="lightsteelblue", fliersize=2)
    ax.set_xlabel(target)
    ax.set_ylabel("")
    ax.set_title("Sale price by neighbourhood")
    fig.tight_layout()
    return fig
