"""Feature engineering pipeline for the house sales dataset.

This module turns the sales table into the numeric design matrix used by
the linear model.  The :class:`FeatureEngineer` is sklearn-compatible
(``fit`` / ``transform``) and must be fitted *only* on training data; the
fitted object is the transform recipe, and ``transform`` applies
it unchanged to any fold.

Ordered transform steps:
    1. ``log_target``: ``sale_price`` → ``log_base(sale_price)``.
    2. ``impute_numeric``: median imputation of numeric columns.
    3. ``collapse_rare``: nominal categories below a training-frequency
       threshold are pooled into ``"other"``.
    4. ``one_hot``: each nominal column expands into one indicator per
       training category except the reference (first) level.

Stateful parameters learned during ``fit``:
    - ``collapser_``: kept categories per nominal column.
    - ``encoder_``: :class:`sklearn.preprocessing.OneHotEncoder` vocabulary.
    - ``imputer_``: training medians of the numeric columns.
    - ``feature_names_``: the output schema, in order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.impute import SimpleImputer
from sklearn.preprocessing import OneHotEncoder
from sklearn.utils.validation import check_is_fitted

from src.features.transforms import LogTransformer, RareCategoryCollapser, nominal_columns_of

logger = logging.getLogger(__name__)


class SchemaMismatchError(ValueError):
    """Raised when a frame does not carry the columns a fitted step expects."""


@dataclass(frozen=True)
class TransformStep:
    """One entry of the fitted transform recipe."""

    name: str
    columns: Tuple[str, ...]
    params: Dict[str, Any] = field(default_factory=dict)


class FeatureEngineer(BaseEstimator, TransformerMixin):
    """Log-transform the target, pool rare categories and one-hot encode.

    Args:
        target: Price column. Never part of the feature matrix.
        log_base: Base of the target log transform.
        other_threshold: Minimum training share (or count, when >= 1) for
            a category to keep its own indicator.
        other_label: Label given to pooled categories.
        nominal_columns: Categorical inputs. ``None`` uses every
            non-numeric column at fit time except ``drop_columns``.
        numeric_columns: Numeric inputs. ``None`` uses every numeric column
            other than the target at fit time. Listed columns that turn out
            to hold labels are encoded as nominal instead.
        drop_columns: Columns never used as features when the lists above
            are auto-detected, e.g. coordinates or identifiers.
    """

    def __init__(
        self,
        target: str = "sale_price",
        log_base: float = 10,
        other_threshold: float = 0.01,
        other_label: str = "other",
        nominal_columns: Optional[Sequence[str]] = None,
        numeric_columns: Optional[Sequence[str]] = None,
        drop_columns: Optional[Sequence[str]] = None,
    ) -> None:
        self.target = target
        self.log_base = log_base
        self.other_threshold = other_threshold
        self.other_label = other_label
        self.nominal_columns = nominal_columns
        self.numeric_columns = numeric_columns
        self.drop_columns = drop_columns

    # ------------------------------------------------------------------
    # Sklearn API
    # ------------------------------------------------------------------

    def fit(self, df: pd.DataFrame, y: Optional[pd.Series] = None) -> "FeatureEngineer":
        """Learn the transform recipe from training data.

        Args:
            df: Training fold, including the target column.
            y: Ignored; present for sklearn compatibility.

        Returns:
            Fitted transformer (self).

        Raises:
            SchemaMismatchError: If configured columns are missing.
            ValueError: If any training target is not strictly positive.
        """
        self.nominal_columns_, self.numeric_columns_ = self._resolve_columns(df)
        self._check_columns(df, self.nominal_columns_ + self.numeric_columns_ + [self.target])

        self.target_transformer_ = LogTransformer(base=self.log_base).fit()
        self.target_transformer_.transform(df[self.target])

        self.imputer_ = None
        if self.numeric_columns_:
            self.imputer_ = SimpleImputer(strategy="median", keep_empty_features=True)
            self.imputer_.fit(df[self.numeric_columns_].astype(float))

        self.collapser_ = RareCategoryCollapser(
            columns=self.nominal_columns_,
            threshold=self.other_threshold,
            other_label=self.other_label,
        ).fit(df)

        self.encoder_ = None
        encoded_names: List[str] = []
        if self.nominal_columns_:
            collapsed = self.collapser_.transform(df[self.nominal_columns_])
            self.encoder_ = OneHotEncoder(
                drop="first",
                handle_unknown="ignore",
                sparse_output=False,
                dtype=float,
            )
            self.encoder_.fit(collapsed[self.nominal_columns_])
            encoded_names = list(self.encoder_.get_feature_names_out(self.nominal_columns_))

        self.feature_names_: List[str] = list(self.numeric_columns_) + encoded_names
        self.steps_: List[TransformStep] = self._describe_steps()

        logger.info(
            "FeatureEngineer fitted: %d numeric + %d nominal inputs → %d features.",
            len(self.numeric_columns_),
            len(self.nominal_columns_),
            len(self.feature_names_),
        )
        return self

    def transform(self, df: pd.DataFrame, y: Optional[pd.Series] = None) -> pd.DataFrame:
        """Apply the fitted recipe to any fold.

        Args:
            df: Frame carrying at least the fitted input columns. The target
                column is optional and ignored.
            y: Ignored; present for sklearn compatibility.

        Returns:
            Float DataFrame with columns exactly ``feature_names_``, indexed
            like ``df``.

        Raises:
            SchemaMismatchError: If fitted input columns are missing.
        """
        check_is_fitted(self, "feature_names_")
        self._check_columns(df, self.nominal_columns_ + self.numeric_columns_)

        parts = []
        if self.imputer_ is not None:
            numeric = self.imputer_.transform(df[self.numeric_columns_].astype(float))
            parts.append(pd.DataFrame(numeric, columns=self.numeric_columns_, index=df.index))

        if self.encoder_ is not None:
            collapsed = self.collapser_.transform(df[self.nominal_columns_])
            encoded = self.encoder_.transform(collapsed[self.nominal_columns_])
            parts.append(
                pd.DataFrame(
                    encoded,
                    columns=self.encoder_.get_feature_names_out(self.nominal_columns_),
                    index=df.index,
                )
            )

        X = pd.concat(parts, axis=1) if parts else pd.DataFrame(index=df.index)
        if list(X.columns) != self.feature_names_:
            raise SchemaMismatchError(
                "Transformed columns differ from the fitted schema: "
                f"{list(X.columns)} vs {self.feature_names_}."
            )

        logger.info("Feature engineering complete: %d rows × %d columns.", *X.shape)
        return X

    # ------------------------------------------------------------------
    # Target helpers
    # ------------------------------------------------------------------

    def transform_target(self, df: pd.DataFrame) -> pd.Series:
        """Return the log-scale target of ``df``.

        Raises:
            SchemaMismatchError: If the target column is missing.
            ValueError: If any target value is not strictly positive.
        """
        check_is_fitted(self, "target_transformer_")
        self._check_columns(df, [self.target])
        return pd.Series(
            self.target_transformer_.transform(df[self.target]),
            index=df.index,
            name=f"log_{self.target}",
        )

    def inverse_target(self, y_log) -> np.ndarray:
        """Map log-scale values back to prices."""
        check_is_fitted(self, "target_transformer_")
        return self.target_transformer_.inverse_transform(y_log)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _resolve_columns(self, df: pd.DataFrame) -> Tuple[List[str], List[str]]:
        excluded = set(self.drop_columns or ()) | {self.target}

        relabelled: List[str] = []
        if self.numeric_columns is not None:
            numeric = []
            for c in self.numeric_columns:
                if c in df.columns and not pd.api.types.is_numeric_dtype(df[c]):
                    relabelled.append(c)
                else:
                    numeric.append(c)
        else:
            numeric = [
                c
                for c in df.select_dtypes(include="number").columns
                if c not in excluded
            ]
        if relabelled:
            logger.warning(
                "Columns %s hold labels rather than numbers; encoding them as nominal.",
                relabelled,
            )

        if self.nominal_columns is not None:
            nominal = list(self.nominal_columns)
            nominal += [c for c in relabelled if c not in nominal]
        else:
            nominal = [c for c in nominal_columns_of(df) if c not in excluded]

        overlap = set(nominal) & set(numeric)
        if self.target in nominal or self.target in numeric or overlap:
            raise ValueError(
                f"Feature columns must be disjoint and exclude the target "
                f"('{self.target}'); overlap: {sorted(overlap)}."
            )
        return nominal, numeric

    @staticmethod
    def _check_columns(df: pd.DataFrame, required: List[str]) -> None:
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise SchemaMismatchError(f"Missing columns for feature transform: {missing}")

    def _describe_steps(self) -> List[TransformStep]:
        steps = [
            TransformStep("log_target", (self.target,), {"base": self.log_base}),
        ]
        if self.imputer_ is not None:
            steps.append(
                TransformStep(
                    "impute_numeric",
                    tuple(self.numeric_columns_),
                    {"medians": dict(zip(self.numeric_columns_, self.imputer_.statistics_))},
                )
            )
        if self.nominal_columns_:
            steps.append(
                TransformStep(
                    "collapse_rare",
                    tuple(self.nominal_columns_),
                    {
                        "threshold": self.other_threshold,
                        "other_label": self.other_label,
                        "kept": dict(self.collapser_.kept_categories_),
                    },
                )
            )
            steps.append(
                TransformStep(
                    "one_hot",
                    tuple(self.nominal_columns_),
                    {
                        "reference": {
                            col: cats[0]
                            for col, cats in zip(self.nominal_columns_, self.encoder_.categories_)
                        }
                    },
                )
            )
        return steps
