"""Unit tests for src/data/loader.py and src/data/synthetic.py."""

import inspect
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

import config as defaults
from src.data.loader import DataIngestor, materialize_dataset, standardise_column_names
from src.data.synthetic import make_sales_dataset


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def raw_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "SalePrice": [215000, 105000, 172000],
            "Gr Liv Area": [1656, 896, 1329],
            "Neighborhood": ["North_Ames", "North_Ames", "Gilbert"],
            "Latitude": [42.05, 42.05, 42.10],
            "Longitude": [-93.63, -93.62, -93.64],
        }
    )


@pytest.fixture()
def sample_excel(tmp_path: Path, raw_frame: pd.DataFrame) -> Path:
    """Write a minimal valid Excel file and return its path."""
    path = tmp_path / "sample.xlsx"
    raw_frame.to_excel(path, index=False, engine="openpyxl")
    return path


@pytest.fixture()
def sample_csv(tmp_path: Path, raw_frame: pd.DataFrame) -> Path:
    path = tmp_path / "sample.csv"
    raw_frame.to_csv(path, index=False)
    return path


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestDataIngestor:
    def test_loads_existing_excel(self, sample_excel: Path) -> None:
        df = DataIngestor(sample_excel).load_excel_data()
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 3
        assert "SalePrice" in df.columns

    def test_loads_existing_csv(self, sample_csv: Path) -> None:
        df = DataIngestor(sample_csv).load_csv_data()
        assert df.shape == (3, 5)

    def test_load_dispatches_on_suffix(self, sample_csv: Path, sample_excel: Path) -> None:
        pd.testing.assert_frame_equal(
            DataIngestor(sample_csv).load(),
            DataIngestor(sample_excel).load(),
            check_dtype=False,
        )

    def test_unsupported_suffix_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "data.parquet"
        path.write_bytes(b"")
        with pytest.raises(ValueError, match="Unsupported file format"):
            DataIngestor(path).load()

    def test_raises_for_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="File not found"):
            DataIngestor(tmp_path / "nonexistent.csv").load_csv_data()

    def test_raises_for_empty_sheet(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.xlsx"
        pd.DataFrame().to_excel(path, index=False, engine="openpyxl")
        with pytest.raises(ValueError, match="empty"):
            DataIngestor(path).load_excel_data()

    def test_raises_for_empty_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(ValueError, match="empty"):
            DataIngestor(path).load_csv_data()

    def test_default_path_uses_env(self, monkeypatch: pytest.MonkeyPatch, sample_csv: Path) -> None:
        monkeypatch.setenv("DATA_PATH", str(sample_csv))
        assert DataIngestor().file_path == sample_csv


class TestStandardiseColumnNames:
    def test_camel_and_spaced_headers(self, raw_frame: pd.DataFrame) -> None:
        out = standardise_column_names(raw_frame)
        assert list(out.columns) == [
            "sale_price",
            "gr_liv_area",
            "neighborhood",
            "latitude",
            "longitude",
        ]

    def test_snake_case_headers_pass_through(self) -> None:
        df = pd.DataFrame(columns=["Sale_Price", "Year_Sold", "Bldg_Type"])
        assert list(standardise_column_names(df).columns) == [
            "sale_price",
            "year_sold",
            "bldg_type",
        ]

    def test_r_style_headers(self) -> None:
        df = pd.DataFrame(
            columns=["Sale_Price", "Bedroom_AbvGr", "Overall_Qual", "MS_Zoning", "Heating_QC"]
        )
        assert list(standardise_column_names(df).columns) == [
            "sale_price",
            "bedroom_abv_gr",
            "overall_qual",
            "ms_zoning",
            "heating_qc",
        ]

    def test_does_not_modify_input(self, raw_frame: pd.DataFrame) -> None:
        standardise_column_names(raw_frame)
        assert "SalePrice" in raw_frame.columns


class TestMakeSalesDataset:
    def test_deterministic_for_seed(self) -> None:
        pd.testing.assert_frame_equal(
            make_sales_dataset(n_rows=200, seed=3), make_sales_dataset(n_rows=200, seed=3)
        )

    def test_different_seeds_differ(self) -> None:
        a = make_sales_dataset(n_rows=50, seed=1)
        b = make_sales_dataset(n_rows=50, seed=2)
        assert not a["sale_price"].equals(b["sale_price"])

    def test_price_is_positive_and_right_skewed(self) -> None:
        df = make_sales_dataset(n_rows=2000, seed=0)
        assert (df["sale_price"] > 0).all()
        assert df["sale_price"].mean() > df["sale_price"].median()

    def test_has_rare_neighbourhoods(self) -> None:
        df = make_sales_dataset(n_rows=2930, seed=42)
        shares = df["neighborhood"].value_counts(normalize=True)
        assert (shares < 0.01).any()
        assert (shares >= 0.01).sum() > 5

    def test_year_built_not_after_sale(self) -> None:
        df = make_sales_dataset(n_rows=500, seed=5)
        assert (df["year_built"] <= df["year_sold"]).all()

    def test_has_ames_quality_ratings(self) -> None:
        df = make_sales_dataset(n_rows=1000, seed=6)
        for col in ("exter_qual", "kitchen_qual", "heating_qc"):
            assert set(df[col]) <= {"Poor", "Fair", "Typical", "Good", "Excellent"}
        assert "No_Basement" in set(df["bsmt_qual"])
        assert df["ms_zoning"].nunique() > 2
        by_rating = df.groupby("exter_qual")["overall_qual"].mean()
        assert by_rating["Good"] > by_rating["Typical"]

    def test_default_size_matches_config(self) -> None:
        default = inspect.signature(make_sales_dataset).parameters["n_rows"].default
        assert default == defaults.SYNTHETIC_ROWS == 2930

    def test_rejects_non_positive_rows(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            make_sales_dataset(n_rows=0)


class TestMaterializeDataset:
    def test_builtin_when_no_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATA_PATH", raising=False)
        df = materialize_dataset({"raw_path": None, "synthetic_rows": 40, "seed": 7})
        assert len(df) == 40
        assert {"sale_price", "neighborhood", "latitude", "longitude"} <= set(df.columns)

    def test_reads_configured_file(self, sample_csv: Path) -> None:
        df = materialize_dataset({"raw_path": str(sample_csv)})
        assert list(df.columns)[:2] == ["sale_price", "gr_liv_area"]
        np.testing.assert_array_equal(df["sale_price"].values, [215000, 105000, 172000])

    def test_reads_data_path_env_when_no_raw_path(
        self, monkeypatch: pytest.MonkeyPatch, sample_csv: Path
    ) -> None:
        monkeypatch.setenv("DATA_PATH", str(sample_csv))
        df = materialize_dataset({"raw_path": None, "synthetic_rows": 40})
        assert len(df) == 3
        assert "sale_price" in df.columns

    def test_raw_path_wins_over_env(
        self, monkeypatch: pytest.MonkeyPatch, sample_csv: Path, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("DATA_PATH", str(tmp_path / "nonexistent.csv"))
        assert len(materialize_dataset({"raw_path": str(sample_csv)})) == 3
