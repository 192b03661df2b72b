"""Prediction utilities for the sale price model.

The model predicts in log-space (``log_base(sale_price)``). This module
back-transforms those predictions with the fitted
:class:`~src.features.engineer.FeatureEngineer` and pairs them with the
held-out actuals for evaluation and plotting.
"""

import logging
from typing import Protocol, runtime_checkable

import numpy as np
import pandas as pd

from src.features.engineer import FeatureEngineer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol – any fitted trainer is compatible
# ---------------------------------------------------------------------------


@runtime_checkable
class _FittedModel(Protocol):
    """Structural type for any fitted trainer with a ``predict`` method."""

    def predict(self, X: pd.DataFrame) -> np.ndarray: ...


# ---------------------------------------------------------------------------
# Predictor
# ---------------------------------------------------------------------------


class SalePricePredictor:
    """Wraps a fitted model to produce sale-price predictions.

    Args:
        model: Any fitted object that exposes a ``predict(X)`` method
            returning log-space predictions (e.g. :class:`OLSTrainer`).
        engineer: The fitted feature engineer whose target transform the
            model was trained on.
    """

    def __init__(self, model: _FittedModel, engineer: FeatureEngineer) -> None:
        if not isinstance(model, _FittedModel):
            raise TypeError(
                "model must have a predict(X) method. "
                f"Got {type(model).__name__}."
            )
        self.model = model
        self.engineer = engineer

    def predict_log(self, X: pd.DataFrame) -> np.ndarray:
        """Return raw model predictions in log-space.

        Args:
            X: Feature matrix with the same columns used during training.

        Returns:
            1-D array of log-transformed price predictions.
        """
        log_preds = np.asarray(self.model.predict(X), dtype=float)
        if log_preds.size:
            logger.debug("predict_log: min=%.3f, max=%.3f", log_preds.min(), log_preds.max())
        return log_preds

    def predict_price(self, X: pd.DataFrame) -> np.ndarray:
        """Return sale-price predictions on the original scale.

        Args:
            X: Feature matrix with the same columns used during training.

        Returns:
            1-D array of predicted sale prices.
        """
        prices = self.engineer.inverse_target(self.predict_log(X))
        if prices.size:
            logger.info(
                "predict_price: median=$%.0f, min=$%.0f, max=$%.0f",
                np.median(prices),
                prices.min(),
                prices.max(),
            )
        return prices

    def prediction_frame(self, X: pd.DataFrame, y_log: pd.Series) -> pd.DataFrame:
        """Pair each prediction with its held-out actual value.

        Args:
            X: Transformed test feature matrix.
            y_log: Actual log-scale target aligned with ``X``.

        Returns:
            DataFrame indexed like ``X`` with columns ``actual_log``,
            ``predicted_log``, ``residual_log``, ``actual_price`` and
            ``predicted_price``.

        Raises:
            ValueError: If ``X`` and ``y_log`` differ in length.
        """
        y_log = np.asarray(y_log, dtype=float)
        if len(y_log) != len(X):
            raise ValueError(
                f"X has {len(X)} rows but y_log has {len(y_log)} values."
            )
        log_preds = self.predict_log(X)
        return pd.DataFrame(
            {
                "actual_log": y_log,
                "predicted_log": log_preds,
                "residual_log": y_log - log_preds,
                "actual_price": self.engineer.inverse_target(y_log),
                "predicted_price": self.engineer.inverse_target(log_preds),
            },
            index=X.index,
        )
