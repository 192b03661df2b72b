"""Ordinary least squares trainer for sale price prediction.

The model is trained on the log-transformed target produced by
:class:`src.features.engineer.FeatureEngineer`; back-transformation to
prices is handled by :mod:`src.models.predictor`.
"""

import logging
from typing import List, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.linear_model import LinearRegression
from sklearn.utils.validation import check_is_fitted

from src.features.engineer import SchemaMismatchError

logger = logging.getLogger(__name__)


class OLSTrainer(BaseEstimator, RegressorMixin):
    """Linear regression fitted by ordinary least squares.

    Coefficients come from :class:`sklearn.linear_model.LinearRegression`,
    which solves the least-squares problem with an SVD-based solver and
    therefore copes with collinear indicator columns.

    Args:
        fit_intercept: Whether to estimate an intercept term.
    """

    def __init__(self, fit_intercept: bool = True) -> None:
        self.fit_intercept = fit_intercept

    def fit(
        self,
        X_train: pd.DataFrame,
        y_train: pd.Series,
        X_val: Optional[pd.DataFrame] = None,
        y_val: Optional[pd.Series] = None,
    ) -> "OLSTrainer":
        """Fit the regression on the training fold.

        Args:
            X_train: Training feature matrix.
            y_train: Log-transformed training target.
            X_val: Ignored (included for API consistency).
            y_val: Ignored (included for API consistency).

        Returns:
            Fitted trainer (self).

        Raises:
            ValueError: If the matrix is empty, contains non-finite values,
                or its length differs from the target's.
        """
        X_arr = np.asarray(X_train, dtype=float)
        y_arr = np.asarray(y_train, dtype=float)
        if X_arr.shape[0] == 0:
            raise ValueError("Cannot fit OLS on an empty training set.")
        if X_arr.shape[0] != y_arr.shape[0]:
            raise ValueError(
                f"X_train has {X_arr.shape[0]} rows but y_train has {y_arr.shape[0]}."
            )
        if not (np.isfinite(X_arr).all() and np.isfinite(y_arr).all()):
            raise ValueError("Training data contains NaN or infinite values.")

        self.feature_names_: List[str] = [str(c) for c in getattr(X_train, "columns", range(X_arr.shape[1]))]
        self.model_ = LinearRegression(fit_intercept=self.fit_intercept)
        self.model_.fit(X_arr, y_arr)
        self.n_train_ = X_arr.shape[0]

        if X_arr.shape[1] + int(self.fit_intercept) > X_arr.shape[0]:
            logger.warning(
                "OLS has more parameters (%d) than training rows (%d); "
                "coefficients are not unique.",
                X_arr.shape[1] + int(self.fit_intercept),
                X_arr.shape[0],
            )
        logger.info(
            "OLS trained on %d rows × %d features. Train R²=%.4f.",
            X_arr.shape[0],
            X_arr.shape[1],
            self.model_.score(X_arr, y_arr) if X_arr.shape[0] > 1 else float("nan"),
        )
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """Generate predictions in log-space.

        Args:
            X: Feature matrix with exactly the training columns, in order.

        Returns:
            Array of predicted log-prices.

        Raises:
            SchemaMismatchError: If the columns differ from training.
        """
        check_is_fitted(self, "model_")
        self._check_schema(X)
        return self.model_.predict(np.asarray(X, dtype=float))

    @property
    def coefficients_(self) -> pd.Series:
        """Fitted slope per feature."""
        check_is_fitted(self, "model_")
        return pd.Series(self.model_.coef_, index=self.feature_names_, name="coefficient")

    @property
    def intercept_(self) -> float:
        check_is_fitted(self, "model_")
        return float(self.model_.intercept_)

    def coefficient_table(self, X_train: pd.DataFrame, y_train: pd.Series) -> pd.DataFrame:
        """Return estimates with standard errors, t-statistics and p-values.

        The inference statistics are computed with statsmodels OLS on the
        same training data the model was fitted on.

        Args:
            X_train: Training feature matrix used in :meth:`fit`.
            y_train: Log-transformed training target used in :meth:`fit`.

        Returns:
            DataFrame indexed by term (``const`` first when an intercept is
            fitted) with columns ``estimate``, ``std_error``, ``t_value``
            and ``p_value``.
        """
        check_is_fitted(self, "model_")
        self._check_schema(X_train)
        design = pd.DataFrame(
            np.asarray(X_train, dtype=float), columns=self.feature_names_
        )
        if self.fit_intercept:
            design = sm.add_constant(design, has_constant="add")
        results = sm.OLS(np.asarray(y_train, dtype=float), design).fit()
        return pd.DataFrame(
            {
                "estimate": results.params,
                "std_error": results.bse,
                "t_value": results.tvalues,
                "p_value": results.pvalues,
            }
        ).rename_axis("term")

    def _check_schema(self, X: pd.DataFrame) -> None:
        columns = [str(c) for c in getattr(X, "columns", [])]
        if not hasattr(X, "columns"):
            n_cols = np.asarray(X).shape[1] if np.ndim(X) == 2 else -1
            if n_cols != len(self.feature_names_):
                raise SchemaMismatchError(
                    f"Expected {len(self.feature_names_)} features, got {n_cols}."
                )
            return
        if columns != self.feature_names_:
            extra = sorted(set(columns) - set(self.feature_names_))
            missing = sorted(set(self.feature_names_) - set(columns))
            if not extra and not missing:
                raise SchemaMismatchError(
                    "Feature columns are in a different order than in training."
                )
            raise SchemaMismatchError(
                f"Feature schema differs from training (missing={missing}, unexpected={extra})."
            )
