"""Stratified train/test split of the sales dataset.

Records are grouped into strata by target quantile, the training share is
allocated across strata in proportion to their size, and rows are drawn
within each stratum with a seeded permutation. The overall training size
is always ``round(prop * n)``, so a split of 10 rows at 0.8 gives exactly
8 training and 2 test rows.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataSplit:
    """Disjoint training and test subsets of one dataset."""

    train: pd.DataFrame
    test: pd.DataFrame

    @property
    def sizes(self) -> tuple:
        return len(self.train), len(self.test)


def make_strata(values: pd.Series, n_bins: int = 4) -> pd.Series:
    """Assign each record to a stratum.

    Numeric values are bucketed into ``n_bins`` quantile bins (duplicate
    edges dropped, so heavily tied targets get fewer bins). Non-numeric
    values are used as strata directly.

    Args:
        values: Stratification variable, usually the target.
        n_bins: Number of quantile buckets for numeric values.

    Returns:
        Integer stratum labels aligned with ``values``.
    """
    if n_bins < 1:
        raise ValueError(f"n_bins must be at least 1, got {n_bins}.")
    if pd.api.types.is_numeric_dtype(values):
        if values.nunique() <= 1 or n_bins == 1:
            return pd.Series(0, index=values.index)
        codes = pd.qcut(values, q=n_bins, labels=False, duplicates="drop")
        return codes.astype(int)
    return pd.Series(pd.factorize(values)[0], index=values.index)


def _allocate(stratum_sizes: np.ndarray, n_train: int) -> np.ndarray:
    """Split ``n_train`` across strata with the largest-remainder method."""
    total = stratum_sizes.sum()
    quotas = stratum_sizes * n_train / total
    alloc = np.floor(quotas).astype(int)
    shortfall = n_train - alloc.sum()
    if shortfall:
        # Stable sort so ties go to the earlier (lower-price) stratum.
        order = np.argsort(-(quotas - alloc), kind="mergesort")
        alloc[order[:shortfall]] += 1
    return np.minimum(alloc, stratum_sizes)


def stratified_split(
    df: pd.DataFrame,
    target: str = "sale_price",
    prop: float = 0.75,
    seed: int = 42,
    n_bins: int = 4,
) -> DataSplit:
    """Partition ``df`` into stratified training and test subsets.

    Args:
        df: Dataset to split. Not modified.
        target: Column whose distribution defines the strata.
        prop: Share of records assigned to training, strictly in (0, 1).
        seed: Seed making the partition reproducible.
        n_bins: Number of target quantile buckets.

    Returns:
        :class:`DataSplit` whose ``train`` and ``test`` keep the original
        index labels and row order of ``df``.

    Raises:
        ValueError: If ``prop`` is outside (0, 1) or ``target`` is missing.
    """
    if not 0 < prop < 1:
        raise ValueError(f"Split proportion must be in (0, 1), got {prop}.")
    if target not in df.columns:
        raise ValueError(f"Stratification column '{target}' not found.")
    if df.empty:
        raise ValueError("Cannot split an empty dataset.")

    n = len(df)
    n_train = int(np.floor(prop * n + 0.5))
    strata = make_strata(df[target], n_bins=n_bins).to_numpy()

    labels, sizes = np.unique(strata, return_counts=True)
    alloc = _allocate(sizes, n_train)

    rng = np.random.default_rng(seed)
    positions = np.arange(n)
    train_pos = []
    for label, k in zip(labels, alloc):
        members = positions[strata == label]
        train_pos.append(rng.permutation(members)[:k])

    mask = np.zeros(n, dtype=bool)
    if train_pos:
        mask[np.concatenate(train_pos)] = True

    split = DataSplit(train=df.iloc[mask].copy(), test=df.iloc[~mask].copy())
    logger.info(
        "Stratified split (prop=%.2f, seed=%d, strata=%d) → train: %d | test: %d",
        prop,
        seed,
        len(labels),
        *split.sizes,
    )
    return split
