"""Column-level transforms used by :class:`FeatureEngineer`.

Both transformers follow the sklearn ``fit`` / ``transform`` contract:
anything learned from data is stored on fitted attributes (trailing
underscore) during ``fit`` and reused verbatim by ``transform``.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted

logger = logging.getLogger(__name__)

MISSING_LABEL = "missing"


def nominal_columns_of(df: pd.DataFrame) -> List[str]:
    """Return columns holding categories: anything not numeric, boolean or datetime."""
    return [
        c
        for c in df.columns
        if not (
            pd.api.types.is_numeric_dtype(df[c])
            or pd.api.types.is_bool_dtype(df[c])
            or pd.api.types.is_datetime64_any_dtype(df[c])
        )
    ]


def as_category_strings(values: pd.Series) -> pd.Series:
    """Normalise a nominal column to strings, labelling nulls ``"missing"``."""
    return values.astype(object).where(values.notnull(), MISSING_LABEL).astype(str)


class LogTransformer(BaseEstimator, TransformerMixin):
    """Logarithm with a fixed base, and its inverse.

    Stateless: ``fit`` only exists for pipeline compatibility.

    Args:
        base: Logarithm base. Must be positive and not 1. Defaults to 10.
    """

    def __init__(self, base: float = 10) -> None:
        self.base = base

    def _check_base(self) -> None:
        if self.base <= 0 or self.base == 1:
            raise ValueError(f"Log base must be positive and != 1, got {self.base}.")

    def fit(self, values=None, y=None) -> "LogTransformer":
        self._check_base()
        return self

    def transform(self, values) -> np.ndarray:
        """Return ``log_base(values)``.

        Raises:
            ValueError: If any value is missing, zero or negative.
        """
        self._check_base()
        arr = np.asarray(values, dtype=float)
        bad = ~(arr > 0)  # also catches NaN
        if bad.any():
            raise ValueError(
                f"Log transform requires strictly positive values; "
                f"found {int(bad.sum())} invalid value(s)."
            )
        return np.log(arr) / np.log(self.base)

    def inverse_transform(self, values) -> np.ndarray:
        """Return ``base ** values``."""
        self._check_base()
        return np.power(float(self.base), np.asarray(values, dtype=float))


class RareCategoryCollapser(BaseEstimator, TransformerMixin):
    """Merge infrequent categories of nominal columns into one label.

    Frequencies are measured on the data passed to ``fit`` only. At
    transform time every category that was not kept during fit, including
    ones never seen, becomes ``other_label``.

    Args:
        columns: Nominal columns to collapse. ``None`` collapses every
            non-numeric column seen at fit time.
        threshold: Below 1, the minimum share of rows a category needs to
            be kept; from 1 upwards, the minimum row count.
        other_label: Label for pooled categories.
    """

    def __init__(
        self,
        columns: Optional[Sequence[str]] = None,
        threshold: float = 0.01,
        other_label: str = "other",
    ) -> None:
        self.columns = columns
        self.threshold = threshold
        self.other_label = other_label

    def fit(self, df: pd.DataFrame, y=None) -> "RareCategoryCollapser":
        """Learn which categories of each column are frequent enough to keep.

        Raises:
            ValueError: If ``threshold`` is not positive or a column is missing.
        """
        if self.threshold <= 0:
            raise ValueError(f"threshold must be positive, got {self.threshold}.")

        if self.columns is None:
            columns = nominal_columns_of(df)
        else:
            columns = list(self.columns)
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise ValueError(f"Columns to collapse not found: {missing}")

        self.columns_: List[str] = columns
        self.kept_categories_: Dict[str, List[str]] = {}
        for col in columns:
            values = as_category_strings(df[col])
            if self.threshold < 1:
                freq = values.value_counts(normalize=True)
            else:
                freq = values.value_counts()
            kept = sorted(freq[freq >= self.threshold].index)
            self.kept_categories_[col] = kept
            pooled = len(freq) - len(kept)
            if pooled:
                logger.info(
                    "Collapsing %d rare '%s' categories into '%s' (kept %d).",
                    pooled,
                    col,
                    self.other_label,
                    len(kept),
                )
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Replace non-kept categories with ``other_label``.

        Returns:
            Copy of ``df`` with collapsed nominal columns as strings.
        """
        check_is_fitted(self, "kept_categories_")
        df = df.copy()
        for col in self.columns_:
            values = as_category_strings(df[col])
            df[col] = values.where(values.isin(self.kept_categories_[col]), self.other_label)
        return df
