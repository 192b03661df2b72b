"""Predicted-versus-actual plot for the held-out fold."""

import logging
import os

os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure

from src.evaluation.metrics import compute_metrics

logger = logging.getLogger(__name__)


def plot_predicted_vs_actual(
    predictions: pd.DataFrame,
    actual: str = "actual_log",
    predicted: str = "predicted_log",
) -> Figure:
    """Scatter predictions against actuals with the identity line.

    Args:
        predictions: Output of :meth:`SalePricePredictor.prediction_frame`.
        actual: Column holding actual values.
        predicted: Column holding predicted values.

    Returns:
        The drawn figure, titled with the held-out R² and RMSE.
    """
    y_true = predictions[actual].to_numpy(dtype=float)
    y_pred = predictions[predicted].to_numpy(dtype=float)
    metrics = compute_metrics(y_true, y_pred)

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.scatter(y_true, y_pred, s=12, alpha=0.6, color="steelblue", edgecolors="none")
    lo = float(np.min([y_true.min(), y_pred.min()]))
    hi = float(np.max([y_true.max(), y_pred.max()]))
    ax.plot([lo, hi], [lo, hi], linestyle="--", color="grey", linewidth=1)
    ax.set_xlabel(f"Actual ({actual})")
    ax.set_ylabel(f"Predicted ({predicted})")
    ax.set_title(f"Test set: R²={metrics['r2']:.3f}, RMSE={metrics['rmse']:.4f}")
    ax.set_aspect("equal", adjustable="datalim")
    fig.tight_layout()
    return fig
