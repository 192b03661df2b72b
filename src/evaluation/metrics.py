"""Evaluation metrics for held-out sale price predictions.

:func:`compute_metrics` scores the model where it was fitted, on the
log-scale target (R², RMSE, MAE).  :func:`compute_price_metrics` reports
percentage errors on back-transformed prices, which is what a reader of
the report cares about.
"""

import logging
from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

logger = logging.getLogger(__name__)


def _as_pair(y_true, y_pred):
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.shape != y_pred.shape:
        raise ValueError(
            f"Shape mismatch: y_true {y_true.shape} vs y_pred {y_pred.shape}."
        )
    if y_true.size == 0:
        raise ValueError("Cannot compute metrics on empty arrays.")
    return y_true, y_pred


def compute_metrics(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    label: str = "",
) -> Dict[str, float]:
    """Compute regression metrics on log-scale values.

    Args:
        y_true: Held-out log-scale target.
        y_pred: Log-scale predictions.
        label: Optional label for log output (e.g. ``"test"``).

    Returns:
        Dictionary with the following keys:

        - ``rmse`` – Root Mean Squared Error.
        - ``mae``  – Mean Absolute Error.
        - ``r2``   – Coefficient of Determination. ``nan`` when fewer than
          two values are given or ``y_true`` is constant.

    Raises:
        ValueError: If ``y_true`` and ``y_pred`` have different shapes or
            are empty.
    """
    y_true, y_pred = _as_pair(y_true, y_pred)

    rmse = float(np.sqrt(mean_squared_error(y_true, y_pred)))
    mae = float(mean_absolute_error(y_true, y_pred))
    if y_true.size < 2 or np.ptp(y_true) == 0:
        r2 = float("nan")
    else:
        r2 = float(r2_score(y_true, y_pred))

    prefix = f"[{label}] " if label else ""
    logger.info("%sRMSE=%.4f | MAE=%.4f | R²=%.4f", prefix, rmse, mae, r2)

    return {"rmse": rmse, "mae": mae, "r2": r2}


def compute_price_metrics(
    price_true: np.ndarray,
    price_pred: np.ndarray,
    label: str = "",
) -> Dict[str, float]:
    """Compute percentage-error metrics on original-scale prices.

    Args:
        price_true: Actual sale prices.
        price_pred: Back-transformed predicted prices.
        label: Optional label for log output.

    Returns:
        Dictionary with ``mape``, ``mdape`` (percent), ``within_10pct``
        and ``within_20pct`` (fractions).

    Raises:
        ValueError: On shape mismatch, empty input, or a non-positive
            actual price.
    """
    price_true, price_pred = _as_pair(price_true, price_pred)
    if (price_true <= 0).any():
        raise ValueError("Actual prices must be strictly positive.")

    ape = np.abs((price_true - price_pred) / price_true) * 100
    results = {
        "mape": float(np.mean(ape)),
        "mdape": float(np.median(ape)),
        "within_10pct": float(np.mean(ape <= 10.0)),
        "within_20pct": float(np.mean(ape <= 20.0)),
    }

    prefix = f"[{label}] " if label else ""
    logger.info(
        "%sMAPE=%.2f%% | MdAPE=%.2f%% | within10%%=%.1f%% | within20%%=%.1f%%",
        prefix,
        results["mape"],
        results["mdape"],
        results["within_10pct"] * 100,
        results["within_20pct"] * 100,
    )
    return results


def metrics_to_dataframe(results: Dict[str, Dict[str, float]]) -> pd.DataFrame:
    """Convert a dict of {split_name: metrics_dict} into a tidy DataFrame.

    Args:
        results: Mapping from split label (e.g. ``"test"``) to a metrics
            dict.

    Returns:
        DataFrame with splits as rows and metric names as columns.
    """
    return pd.DataFrame(results).T.rename_axis("split")
