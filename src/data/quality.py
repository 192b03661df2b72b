"""Data quality checks for the house sales dataset."""

import logging
from typing import List

import pandas as pd

from src.features.transforms import nominal_columns_of

logger = logging.getLogger(__name__)


class DataQualityChecker:
    """Runs schema validation and data quality reports on a DataFrame.

    These methods are stateless – they inspect the data and raise/log
    issues without fitting any parameters for later use.
    """

    # Columns that must be present after column-name standardisation.
    REQUIRED_COLUMNS: List[str] = [
        "sale_price",
        "neighborhood",
        "latitude",
        "longitude",
    ]

    def validate_schema(self, df: pd.DataFrame) -> None:
        """Assert that all required columns are present.

        Args:
            df: Standardised DataFrame immediately after loading.

        Raises:
            ValueError: If any required column is missing.
        """
        missing = [c for c in self.REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"DataFrame is missing required columns: {missing}")
        logger.info("Schema validation passed – all required columns present.")

    def validate_target(self, df: pd.DataFrame, target: str = "sale_price") -> None:
        """Assert the target is complete and strictly positive.

        The target is log-transformed downstream, so a zero, negative or
        missing price is rejected here rather than turning into ``-inf``.

        Raises:
            ValueError: If the column is missing, has nulls, or has values <= 0.
        """
        if target not in df.columns:
            raise ValueError(f"Target column '{target}' not found.")
        values = pd.to_numeric(df[target], errors="coerce")
        n_null = int(values.isnull().sum())
        if n_null:
            raise ValueError(f"Target '{target}' has {n_null} missing or non-numeric values.")
        n_bad = int((values <= 0).sum())
        if n_bad:
            raise ValueError(
                f"Target '{target}' must be strictly positive; found {n_bad} values <= 0."
            )
        logger.info(
            "Target '%s' validated: min=%.0f, median=%.0f, max=%.0f.",
            target,
            values.min(),
            values.median(),
            values.max(),
        )

    def report_nulls(self, df: pd.DataFrame, top_n: int = 20) -> pd.DataFrame:
        """Return a summary of missing-value rates for the top-N columns.

        Args:
            df: DataFrame to inspect.
            top_n: Number of columns with the most nulls to log.

        Returns:
            DataFrame with columns ``missing_count`` and ``missing_pct``,
            sorted descending by ``missing_pct``.
        """
        summary = pd.DataFrame(
            {
                "missing_count": df.isnull().sum(),
                "missing_pct": df.isnull().mean() * 100,
            }
        ).sort_values("missing_pct", ascending=False)

        high_null = summary[summary["missing_pct"] > 0].head(top_n)
        if not high_null.empty:
            logger.info(
                "Top-%d columns by missing rate:\n%s", top_n, high_null.to_string()
            )
        return summary

    def report_cardinality(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return unique-value counts for all non-numeric columns.

        Args:
            df: DataFrame to inspect.

        Returns:
            DataFrame with columns ``dtype`` and ``n_unique`` for categorical
            columns, sorted descending.
        """
        cat_cols = nominal_columns_of(df)
        summary = pd.DataFrame(
            {
                "dtype": df[cat_cols].dtypes,
                "n_unique": df[cat_cols].nunique(),
            }
        ).sort_values("n_unique", ascending=False)
        logger.info("Cardinality report:\n%s", summary.to_string())
        return summary

    def run_all(self, df: pd.DataFrame, target: str = "sale_price") -> None:
        """Run all quality checks and log results.

        Args:
            df: Standardised DataFrame to check.
            target: Name of the price column.
        """
        self.validate_schema(df)
        self.validate_target(df, target)
        self.report_nulls(df)
        self.report_cardinality(df)
        logger.info("All quality checks complete.")
