"""Unit tests for src/features/engineer.py."""

import numpy as np
import pandas as pd
import pytest
from sklearn.exceptions import NotFittedError

from src.data.splitter import stratified_split
from src.data.synthetic import make_sales_dataset
from src.features.engineer import FeatureEngineer, SchemaMismatchError


# ---------------------------------------------------------------------------
# Helper – minimal sales DataFrame
# ---------------------------------------------------------------------------


def _make_sales_df() -> pd.DataFrame:
    """Twenty sales: neighbourhood 'Veenker' is rare, 'Blmngtn' is the reference."""
    neighborhoods = ["Blmngtn"] * 8 + ["CollgCr"] * 6 + ["OldTown"] * 5 + ["Veenker"]
    return pd.DataFrame(
        {
            "sale_price": np.linspace(100_000, 400_000, 20),
            "gr_liv_area": np.linspace(800, 2800, 20),
            "year_built": np.arange(1950, 1990, 2).astype(float),
            "neighborhood": neighborhoods,
            "central_air": ["Y", "N"] * 10,
        }
    )


@pytest.fixture()
def sales_df() -> pd.DataFrame:
    return _make_sales_df()


@pytest.fixture()
def fitted_engineer(sales_df: pd.DataFrame) -> FeatureEngineer:
    eng = FeatureEngineer(
        nominal_columns=["neighborhood", "central_air"],
        numeric_columns=["gr_liv_area", "year_built"],
        other_threshold=0.1,
    )
    return eng.fit(sales_df)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestFeatureEngineerFit:
    def test_schema_numeric_then_indicators(self, fitted_engineer: FeatureEngineer) -> None:
        # Veenker (5 %) falls below 10 % and is pooled into "other";
        # Blmngtn and N are the alphabetical reference levels.
        assert fitted_engineer.feature_names_ == [
            "gr_liv_area",
            "year_built",
            "neighborhood_CollgCr",
            "neighborhood_OldTown",
            "neighborhood_other",
            "central_air_Y",
        ]

    def test_steps_are_ordered(self, fitted_engineer: FeatureEngineer) -> None:
        names = [step.name for step in fitted_engineer.steps_]
        assert names == ["log_target", "impute_numeric", "collapse_rare", "one_hot"]
        assert fitted_engineer.steps_[0].params == {"base": 10}
        one_hot = fitted_engineer.steps_[-1]
        assert one_hot.params["reference"] == {"neighborhood": "Blmngtn", "central_air": "N"}

    def test_auto_detects_columns(self, sales_df: pd.DataFrame) -> None:
        eng = FeatureEngineer().fit(sales_df)
        assert eng.nominal_columns_ == ["neighborhood", "central_air"]
        assert eng.numeric_columns_ == ["gr_liv_area", "year_built"]
        assert "sale_price" not in eng.feature_names_

    def test_label_valued_numeric_column_is_encoded(self, sales_df: pd.DataFrame) -> None:
        sales_df["overall_qual"] = ["Good", "Average", "Above_Average", "Good"] * 5
        eng = FeatureEngineer(
            nominal_columns=["neighborhood"],
            numeric_columns=["gr_liv_area", "overall_qual"],
        ).fit(sales_df)
        assert eng.numeric_columns_ == ["gr_liv_area"]
        assert eng.nominal_columns_ == ["neighborhood", "overall_qual"]
        assert "overall_qual_Good" in eng.feature_names_
        assert np.isfinite(eng.transform(sales_df).to_numpy()).all()

    def test_auto_detect_encodes_every_label_column(self) -> None:
        df = make_sales_dataset(n_rows=300, seed=8)
        df["ms_zoning"] = np.where(np.arange(300) % 3 == 0, "RM", "RL")
        eng = FeatureEngineer(
            numeric_columns=["gr_liv_area", "overall_qual"],
            drop_columns=["latitude", "longitude"],
        ).fit(df)
        assert set(eng.nominal_columns_) == {
            "neighborhood",
            "bldg_type",
            "house_style",
            "central_air",
            "ms_zoning",
            "exter_qual",
            "kitchen_qual",
            "heating_qc",
            "bsmt_qual",
        }
        assert "ms_zoning_RM" in eng.feature_names_

    def test_drop_columns_excluded_from_auto_detection(self, sales_df: pd.DataFrame) -> None:
        eng = FeatureEngineer(drop_columns=["year_built", "central_air"]).fit(sales_df)
        assert eng.numeric_columns_ == ["gr_liv_area"]
        assert eng.nominal_columns_ == ["neighborhood"]

    def test_non_positive_training_target_fails(self, sales_df: pd.DataFrame) -> None:
        sales_df.loc[3, "sale_price"] = 0.0
        with pytest.raises(ValueError, match="strictly positive"):
            FeatureEngineer().fit(sales_df)

    def test_missing_configured_column(self, sales_df: pd.DataFrame) -> None:
        eng = FeatureEngineer(nominal_columns=["zoning"], numeric_columns=[])
        with pytest.raises(SchemaMismatchError, match="zoning"):
            eng.fit(sales_df)

    def test_target_cannot_be_a_feature(self, sales_df: pd.DataFrame) -> None:
        eng = FeatureEngineer(numeric_columns=["sale_price", "gr_liv_area"])
        with pytest.raises(ValueError, match="exclude the target"):
            eng.fit(sales_df)


class TestFeatureEngineerTransform:
    def test_output_is_numeric_and_finite(self, fitted_engineer: FeatureEngineer, sales_df: pd.DataFrame) -> None:
        X = fitted_engineer.transform(sales_df)
        assert X.dtypes.map(pd.api.types.is_float_dtype).all()
        assert np.isfinite(X.to_numpy()).all()
        assert X.index.equals(sales_df.index)

    def test_indicator_values(self, fitted_engineer: FeatureEngineer, sales_df: pd.DataFrame) -> None:
        X = fitted_engineer.transform(sales_df)
        veenker = X.iloc[19]
        assert veenker["neighborhood_other"] == 1.0
        assert veenker["neighborhood_CollgCr"] == 0.0
        reference = X.iloc[0]
        assert reference[["neighborhood_CollgCr", "neighborhood_OldTown", "neighborhood_other"]].sum() == 0

    def test_test_schema_matches_training(self, fitted_engineer: FeatureEngineer) -> None:
        test = pd.DataFrame(
            {
                "sale_price": [150_000.0, 250_000.0],
                "gr_liv_area": [1200.0, np.nan],
                "year_built": [1975.0, 2001.0],
                "neighborhood": ["Somerst", "OldTown"],  # Somerst never seen
                "central_air": ["Y", "Y"],
            }
        )
        X = fitted_engineer.transform(test)
        assert list(X.columns) == fitted_engineer.feature_names_

    def test_unseen_category_goes_to_other(self, fitted_engineer: FeatureEngineer) -> None:
        test = _make_sales_df().iloc[:1].assign(neighborhood="Somerst")
        X = fitted_engineer.transform(test)
        assert X.iloc[0]["neighborhood_other"] == 1.0

    def test_unseen_category_without_other_level_is_all_zero(self, sales_df: pd.DataFrame) -> None:
        # No rare categories in training → no "other" indicator exists.
        eng = FeatureEngineer(nominal_columns=["neighborhood"], numeric_columns=[], other_threshold=0.01)
        eng.fit(sales_df)
        assert "neighborhood_other" not in eng.feature_names_
        X = eng.transform(sales_df.iloc[:1].assign(neighborhood="Somerst"))
        assert list(X.columns) == eng.feature_names_
        assert X.to_numpy().sum() == 0

    def test_numeric_imputed_with_training_median(self, fitted_engineer: FeatureEngineer) -> None:
        test = _make_sales_df().iloc[:1].copy()
        test["gr_liv_area"] = np.nan
        X = fitted_engineer.transform(test)
        assert X.iloc[0]["gr_liv_area"] == pytest.approx(1800.0)

    def test_target_column_not_required(self, fitted_engineer: FeatureEngineer, sales_df: pd.DataFrame) -> None:
        X = fitted_engineer.transform(sales_df.drop(columns=["sale_price"]))
        assert X.shape == (20, 6)

    def test_missing_input_column_raises(self, fitted_engineer: FeatureEngineer, sales_df: pd.DataFrame) -> None:
        with pytest.raises(SchemaMismatchError, match="central_air"):
            fitted_engineer.transform(sales_df.drop(columns=["central_air"]))

    def test_transform_before_fit(self, sales_df: pd.DataFrame) -> None:
        with pytest.raises(NotFittedError):
            FeatureEngineer().transform(sales_df)

    def test_transform_is_pure(self, fitted_engineer: FeatureEngineer, sales_df: pd.DataFrame) -> None:
        before = sales_df.copy()
        a = fitted_engineer.transform(sales_df)
        b = fitted_engineer.transform(sales_df)
        pd.testing.assert_frame_equal(a, b)
        pd.testing.assert_frame_equal(sales_df, before)


class TestTargetTransform:
    def test_log_base_ten(self, fitted_engineer: FeatureEngineer) -> None:
        df = pd.DataFrame({"sale_price": [1_000.0, 100_000.0]})
        y = fitted_engineer.transform_target(df)
        np.testing.assert_allclose(y.values, [3.0, 5.0])
        assert y.name == "log_sale_price"

    def test_inverse_round_trip(self, fitted_engineer: FeatureEngineer, sales_df: pd.DataFrame) -> None:
        y = fitted_engineer.transform_target(sales_df)
        np.testing.assert_allclose(fitted_engineer.inverse_target(y), sales_df["sale_price"].values)

    def test_negative_test_target_fails(self, fitted_engineer: FeatureEngineer) -> None:
        with pytest.raises(ValueError, match="strictly positive"):
            fitted_engineer.transform_target(pd.DataFrame({"sale_price": [120_000.0, -1.0]}))


class TestNoLeakage:
    def test_test_fold_never_adds_columns(self) -> None:
        df = make_sales_dataset(n_rows=600, seed=4)
        split = stratified_split(df, prop=0.75, seed=4)
        eng = FeatureEngineer(
            nominal_columns=["neighborhood", "bldg_type", "house_style", "central_air"],
            numeric_columns=["gr_liv_area", "lot_area", "overall_qual"],
            other_threshold=0.02,
        ).fit(split.train)
        X_train = eng.transform(split.train)
        X_test = eng.transform(split.test)
        assert list(X_test.columns) == list(X_train.columns)

    def test_fitted_state_ignores_later_data(self, sales_df: pd.DataFrame) -> None:
        eng = FeatureEngineer(other_threshold=0.1).fit(sales_df)
        kept_before = dict(eng.collapser_.kept_categories_)
        flood = pd.concat([sales_df.assign(neighborhood="Veenker")] * 5)
        eng.transform(flood)
        assert eng.collapser_.kept_categories_ == kept_before
        assert "neighborhood_Veenker" not in eng.feature_names_
