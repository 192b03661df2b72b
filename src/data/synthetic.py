"""Built-in house sales dataset.

Generates an Ames-style table of residential sales so the pipeline can run
without an external file. The generator is seeded, so a given
``(n_rows, seed)`` pair always materialises the same rows.

Sale prices follow a log-linear model of living area, quality, age and a
neighbourhood premium with multiplicative noise, which gives the
right-skewed, strictly positive target typical of housing data.
Zoning and the exterior, kitchen, heating and basement ratings use the
Ames labels (``Typical``, ``Good``, ...) and follow overall quality.
"""

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# name -> (sampling weight, latitude, longitude, log-price premium)
# Weights leave a tail of neighbourhoods below 1 % of sales.
_NEIGHBORHOODS = {
    "North_Ames": (0.150, 42.0430, -93.6180, -0.05),
    "College_Creek": (0.090, 42.0220, -93.6850, 0.08),
    "Old_Town": (0.080, 42.0300, -93.6150, -0.15),
    "Edwards": (0.065, 42.0160, -93.6840, -0.14),
    "Somerset": (0.062, 42.0520, -93.6450, 0.18),
    "Northridge_Heights": (0.055, 42.0600, -93.6560, 0.32),
    "Gilbert": (0.056, 42.1070, -93.6420, 0.06),
    "Sawyer": (0.051, 42.0340, -93.6770, -0.10),
    "Northwest_Ames": (0.045, 42.0500, -93.6330, 0.03),
    "Sawyer_West": (0.043, 42.0350, -93.6900, 0.02),
    "Mitchell": (0.039, 41.9920, -93.6010, -0.04),
    "Brookside": (0.037, 42.0280, -93.6300, -0.16),
    "Crawford": (0.035, 42.0180, -93.6480, 0.07),
    "Iowa_DOT_and_Rail_Road": (0.032, 42.0220, -93.6200, -0.22),
    "Timberland": (0.025, 41.9990, -93.6490, 0.24),
    "Northridge": (0.024, 42.0480, -93.6520, 0.30),
    "Stone_Brook": (0.018, 42.0600, -93.6370, 0.33),
    "South_and_West_of_Iowa_State_University": (0.016, 42.0160, -93.6550, -0.09),
    "Clear_Creek": (0.015, 42.0350, -93.6700, 0.12),
    "Meadow_Village": (0.013, 41.9930, -93.6040, -0.24),
    "Briardale": (0.010, 42.0530, -93.6290, -0.20),
    "Bloomington_Heights": (0.009, 42.0590, -93.6340, 0.15),
    "Veenker": (0.008, 42.0400, -93.6500, 0.20),
    "Northpark_Villa": (0.008, 42.0500, -93.6270, -0.12),
    "Blueste": (0.004, 42.0100, -93.6480, -0.07),
    "Greens": (0.003, 42.0330, -93.6870, 0.05),
    "Green_Hills": (0.001, 42.0090, -93.6480, 0.28),
    "Landmark": (0.001, 42.0370, -93.6810, -0.02),
}

_BLDG_TYPES = {
    "OneFam": 0.83,
    "TwnhsE": 0.08,
    "Duplex": 0.04,
    "Twnhs": 0.03,
    "TwoFmCon": 0.02,
}

_HOUSE_STYLES = {
    "One_Story": 0.50,
    "Two_Story": 0.30,
    "One_and_Half_Fin": 0.11,
    "SLvl": 0.04,
    "SFoyer": 0.03,
    "Two_and_Half_Unf": 0.01,
    "One_and_Half_Unf": 0.01,
}

_MS_ZONING = {
    "Residential_Low_Density": 0.776,
    "Residential_Medium_Density": 0.158,
    "Floating_Village_Residential": 0.047,
    "Residential_High_Density": 0.009,
    "C_all": 0.008,
    "I_all": 0.001,
    "A_agr": 0.001,
}

_QUALITY_LEVELS = np.array(["Poor", "Fair", "Typical", "Good", "Excellent"])


def _choice(rng: np.random.Generator, table: dict, n: int) -> np.ndarray:
    keys = list(table)
    weights = np.array([table[k] if np.isscalar(table[k]) else table[k][0] for k in keys])
    return rng.choice(keys, size=n, p=weights / weights.sum())


def _rating(rng: np.random.Generator, overall_qual: np.ndarray, spread: float = 1.0) -> np.ndarray:
    """Five-level quality label that tracks ``overall_qual`` with noise."""
    score = overall_qual + rng.normal(0, spread, size=len(overall_qual))
    return _QUALITY_LEVELS[np.digitize(score, [2.5, 4.5, 6.5, 8.5])]


def make_sales_dataset(n_rows: int = 2930, seed: int = 42) -> pd.DataFrame:
    """Build the in-memory house sales table.

    Args:
        n_rows: Number of sales to generate.
        seed: Seed for :func:`numpy.random.default_rng`.

    Returns:
        DataFrame with one row per sale and a strictly positive
        ``sale_price`` column.

    Raises:
        ValueError: If ``n_rows`` is not positive.
    """
    if n_rows <= 0:
        raise ValueError(f"n_rows must be positive, got {n_rows}.")

    rng = np.random.default_rng(seed)

    neighborhood = _choice(rng, _NEIGHBORHOODS, n_rows)
    meta = pd.DataFrame.from_dict(
        _NEIGHBORHOODS, orient="index", columns=["weight", "lat", "lon", "premium"]
    ).loc[neighborhood]

    gr_liv_area = np.round(rng.lognormal(mean=7.27, sigma=0.32, size=n_rows))
    lot_area = np.round(rng.lognormal(mean=9.1, sigma=0.45, size=n_rows))
    year_built = rng.integers(1872, 2011, size=n_rows)
    year_sold = rng.integers(2006, 2011, size=n_rows)
    year_built = np.minimum(year_built, year_sold)
    mo_sold = rng.integers(1, 13, size=n_rows)
    overall_qual = np.clip(np.round(rng.normal(6.1, 1.4, size=n_rows)), 1, 10).astype(int)
    bedroom_abv_gr = np.clip(np.round(gr_liv_area / 500 + rng.normal(0, 0.7, size=n_rows)), 0, 8).astype(int)
    full_bath = np.clip(np.round(gr_liv_area / 900 + rng.normal(0, 0.4, size=n_rows)), 0, 4).astype(int)
    garage_cars = np.clip(np.round(rng.normal(1.8, 0.75, size=n_rows)), 0, 5).astype(int)
    central_air = np.where(rng.random(n_rows) < 0.93, "Y", "N")

    age = year_sold - year_built
    log10_price = (
        2.80
        + 0.55 * np.log10(gr_liv_area)
        + 0.10 * np.log10(lot_area)
        + 0.045 * overall_qual
        - 0.0012 * age
        + 0.02 * garage_cars
        + 0.03 * (central_air == "Y")
        + meta["premium"].to_numpy() / np.log(10)
        + rng.normal(0, 0.06, size=n_rows)
    )

    df = pd.DataFrame(
        {
            "sale_price": np.round(10 ** log10_price, -2),
            "gr_liv_area": gr_liv_area,
            "lot_area": lot_area,
            "year_built": year_built,
            "year_sold": year_sold,
            "mo_sold": mo_sold,
            "overall_qual": overall_qual,
            "bedroom_abv_gr": bedroom_abv_gr,
            "full_bath": full_bath,
            "garage_cars": garage_cars,
            "neighborhood": neighborhood,
            "bldg_type": _choice(rng, _BLDG_TYPES, n_rows),
            "house_style": _choice(rng, _HOUSE_STYLES, n_rows),
            "central_air": central_air,
            "latitude": meta["lat"].to_numpy() + rng.normal(0, 0.004, size=n_rows),
            "longitude": meta["lon"].to_numpy() + rng.normal(0, 0.004, size=n_rows),
        }
    )

    # Zoning and the Ames quality ratings.
    df["ms_zoning"] = _choice(rng, _MS_ZONING, n_rows)
    df["exter_qual"] = _rating(rng, overall_qual)
    df["kitchen_qual"] = _rating(rng, overall_qual)
    df["heating_qc"] = _rating(rng, overall_qual, spread=1.5)
    bsmt_qual = _rating(rng, overall_qual)
    df["bsmt_qual"] = np.where(rng.random(n_rows) < 0.03, "No_Basement", bsmt_qual)

    logger.info("Materialised %d sales across %d neighbourhoods.", len(df), df["neighborhood"].nunique())
    return df
