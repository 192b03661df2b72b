"""Map of a random subsample of sales, coloured by neighbourhood."""

import logging
import os
from typing import Dict, Optional

os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

logger = logging.getLogger(__name__)

UNMAPPED_COLOUR = "lightgrey"


def sample_sales(df: pd.DataFrame, n: int = 500, seed: int = 42) -> pd.DataFrame:
    """Draw ``n`` sales without replacement.

    ``n`` larger than the dataset returns every row (in sampled order).

    Raises:
        ValueError: If ``n`` is not positive.
    """
    if n <= 0:
        raise ValueError(f"Sample size must be positive, got {n}.")
    n = min(n, len(df))
    return df.sample(n=n, random_state=seed)


def neighborhood_palette(categories) -> Dict[str, tuple]:
    """Map each distinct category (sorted) to a colour."""
    levels = sorted(pd.unique(pd.Series(categories).astype(str)))
    colours = sns.color_palette("husl", n_colors=max(len(levels), 1))
    return dict(zip(levels, colours))


def plot_sales_map(
    sample: pd.DataFrame,
    column: str = "neighborhood",
    lat: str = "latitude",
    lon: str = "longitude",
    palette: Optional[Dict[str, tuple]] = None,
) -> Figure:
    """Scatter the sampled sales by longitude/latitude.

    Args:
        sample: Rows to plot, typically from :func:`sample_sales`.
        column: Category used for colour.
        lat: Latitude column.
        lon: Longitude column.
        palette: Category → colour mapping; built from ``sample`` if omitted.
            Levels it does not cover are drawn in ``UNMAPPED_COLOUR``.

    Returns:
        The drawn figure.
    """
    labels = sample[column].astype(str)
    if palette is None:
        palette = neighborhood_palette(labels)

    fig, ax = plt.subplots(figsize=(9, 8))
    present = set(labels)
    levels = [level for level in palette if level in present]
    unmapped = sorted(present - set(palette))
    if unmapped:
        logger.warning("No palette colour for %s; drawing them in grey.", unmapped)
    for level in levels + unmapped:
        mask = labels == level
        ax.scatter(
            sample.loc[mask, lon],
            sample.loc[mask, lat],
            s=14,
            color=palette.get(level, UNMAPPED_COLOUR),
            label=level,
            alpha=0.8,
            edgecolors="none",
        )
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title(f"{len(sample):,} sampled sales by {column}")
    ax.set_aspect("equal", adjustable="datalim")
    ax.legend(loc="center left", bbox_to_anchor=(1.01, 0.5), fontsize=7, frameon=False)
    fig.tight_layout()
    logger.info("Plotted %d sales over %d %s levels.", len(sample), len(present), column)
    return fig
