"""Data loading module for the house sales dataset."""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from src.data.synthetic import make_sales_dataset

logger = logging.getLogger(__name__)

# Raw Ames exports use CamelCase ("SalePrice"), spaced ("Gr Liv Area") or
# R-style ("Bedroom_AbvGr") headers; a few need an explicit mapping after
# lower-casing.
_COLUMN_ALIASES = {
    "saleprice": "sale_price",
    "grlivarea": "gr_liv_area",
    "lotarea": "lot_area",
    "yearbuilt": "year_built",
    "yrsold": "year_sold",
    "yr_sold": "year_sold",
    "mosold": "mo_sold",
    "overallqual": "overall_qual",
    "bedroomabvgr": "bedroom_abv_gr",
    "bedroom_abvgr": "bedroom_abv_gr",
    "fullbath": "full_bath",
    "garagecars": "garage_cars",
    "bldgtype": "bldg_type",
    "housestyle": "house_style",
    "centralair": "central_air",
}


def standardise_column_names(df: pd.DataFrame) -> pd.DataFrame:
    """Lower-case and snake-case all column names.

    Args:
        df: DataFrame with raw headers.

    Returns:
        Copy of ``df`` with normalised column names.
    """
    def _norm(name: object) -> str:
        s = re.sub(r"[^0-9a-zA-Z]+", "_", str(name).strip()).strip("_").lower()
        return _COLUMN_ALIASES.get(s, s)

    df = df.copy()
    df.columns = [_norm(c) for c in df.columns]
    return df


class DataIngestor:
    """Handles validated data loading from local CSV or Excel files.

    Args:
        file_path: Path to the data file. Falls back to the DATA_PATH env
            var or 'data/ames.csv' if not provided.
    """

    def __init__(self, file_path: Optional[Union[str, Path]] = None) -> None:
        self.file_path = Path(file_path or os.getenv("DATA_PATH", "data/ames.csv"))

    def _check_exists(self) -> None:
        if not self.file_path.exists():
            msg = f"File not found: {self.file_path}"
            logger.error(msg)
            raise FileNotFoundError(msg)

    def _check_not_empty(self, df: pd.DataFrame) -> pd.DataFrame:
        if df.empty:
            raise ValueError(f"Loaded DataFrame from '{self.file_path}' is empty.")
        logger.info("Successfully loaded %d rows and %d columns.", *df.shape)
        return df

    def load_csv_data(self) -> pd.DataFrame:
        """Load a CSV file into a DataFrame with validation.

        Raises:
            FileNotFoundError: If the file path does not exist.
            ValueError: If the loaded DataFrame is empty.
        """
        logger.info("Attempting to load data from: %s", self.file_path)
        self._check_exists()
        try:
            df = pd.read_csv(self.file_path)
        except pd.errors.EmptyDataError:
            df = pd.DataFrame()
        return self._check_not_empty(df)

    def load_excel_data(self, sheet_name: Union[str, int] = 0) -> pd.DataFrame:
        """Load an Excel file into a DataFrame with validation.

        Args:
            sheet_name: Sheet index or name to load. Defaults to first sheet.

        Returns:
            Loaded DataFrame.

        Raises:
            FileNotFoundError: If the file path does not exist.
            ValueError: If the loaded DataFrame is empty.
        """
        logger.info("Attempting to load data from: %s", self.file_path)
        self._check_exists()

        try:
            df = pd.read_excel(self.file_path, sheet_name=sheet_name, engine="openpyxl")
        except Exception as exc:
            logger.error("Failed to read Excel file: %s", exc)
            raise

        return self._check_not_empty(df)

    def load(self, sheet_name: Union[str, int] = 0) -> pd.DataFrame:
        """Load the file, choosing the reader from its suffix.

        Raises:
            ValueError: If the suffix is neither CSV nor Excel.
        """
        suffix = self.file_path.suffix.lower()
        if suffix == ".csv":
            return self.load_csv_data()
        if suffix in (".xlsx", ".xls"):
            return self.load_excel_data(sheet_name=sheet_name)
        raise ValueError(
            f"Unsupported file format '{suffix}'. Use .csv, .xlsx or .xls."
        )


def materialize_dataset(data_cfg: dict) -> pd.DataFrame:
    """Produce the dataset the pipeline runs on.

    Reads ``raw_path`` when one is configured, then the file named by the
    ``DATA_PATH`` environment variable, and otherwise builds the fixed
    in-memory sales dataset.

    Args:
        data_cfg: The ``data`` section of the pipeline config.

    Returns:
        DataFrame with standardised column names. Callers must treat it as
        read-only.
    """
    raw_path = data_cfg.get("raw_path") or os.getenv("DATA_PATH")
    if raw_path:
        df = DataIngestor(raw_path).load(sheet_name=data_cfg.get("sheet_name", 0))
    else:
        n_rows = int(data_cfg.get("synthetic_rows", 2930))
        logger.info("No raw_path or DATA_PATH set; materialising %d built-in sales.", n_rows)
        df = make_sales_dataset(n_rows=n_rows, seed=data_cfg.get("seed", 42))
    return standardise_column_names(df)
