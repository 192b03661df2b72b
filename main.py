"""Entry point for the sale price regression pipeline.

Usage
-----
    python main.py                          # uses configs/config.yaml
    python main.py --config path/to.yaml
    python main.py --data path/to/ames.csv  # override data path
    python main.py --output-dir reports/    # override output directory
    python main.py --no-plots               # metrics only

Pipeline steps
--------------
1. Materialise the sales dataset (file or built-in).
2. Run data quality checks.
3. Descriptive plots: price distribution, sales and price by neighbourhood.
4. Map of a random subsample of sales.
5. Stratified train/test split on the sale price.
6. Fit the feature transform on the training fold, apply it to both folds.
7. Fit OLS on the log-scale target, predict the test fold, report R²/RMSE
   and plot predicted against actual values.
"""

import argparse
import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
import yaml

# ---------------------------------------------------------------------------
# Bootstrap logging before any local imports so module-level loggers work.
# ---------------------------------------------------------------------------


def _setup_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    fmt = fmt or "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO), format=fmt, force=True
    )


_setup_logging()  # default until config is loaded
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Local imports
# ---------------------------------------------------------------------------

import config as defaults
from src.data.loader import materialize_dataset
from src.data.quality import DataQualityChecker
from src.data.splitter import stratified_split
from src.evaluation.metrics import compute_metrics, compute_price_metrics, metrics_to_dataframe
from src.features.engineer import FeatureEngineer
from src.models.predictor import SalePricePredictor
from src.models.trainer import OLSTrainer
from src.visualization.eda import (
    plot_neighborhood_counts,
    plot_price_by_neighborhood,
    plot_price_distribution,
    save_figure,
)
from src.visualization.evaluation import plot_predicted_vs_actual
from src.visualization.geo import neighborhood_palette, plot_sales_map, sample_sales


# ---------------------------------------------------------------------------
# Config helpers
# ---------------------------------------------------------------------------


def load_config(path: Optional[str] = "configs/config.yaml") -> dict:
    """Load the YAML configuration, layered over the defaults in config.py.

    Args:
        path: Path to the YAML config file. ``None`` returns the defaults.

    Returns:
        Configuration dictionary with every section present.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    cfg = copy.deepcopy(defaults.DEFAULTS)
    if path is None:
        return cfg

    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")
    with open(cfg_path) as f:
        overrides = yaml.safe_load(f) or {}

    for section, values in overrides.items():
        if isinstance(values, dict) and isinstance(cfg.get(section), dict):
            cfg[section].update(values)
        else:
            cfg[section] = values
    return cfg


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


@dataclass
class PipelineResult:
    """Everything a run produces besides the files it writes."""

    n_train: int
    n_test: int
    metrics: Dict[str, Dict[str, float]]
    predictions: pd.DataFrame
    coefficients: pd.Series
    figures: List[Path] = field(default_factory=list)


def run_pipeline(
    config_path: Optional[str] = "configs/config.yaml",
    data_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    make_plots: Optional[bool] = None,
    cfg: Optional[dict] = None,
    data: Optional[pd.DataFrame] = None,
) -> PipelineResult:
    """Execute the full analysis and evaluation pipeline.

    Args:
        config_path: Path to the YAML configuration file.
        data_path: Override for the raw data path in the config.
        output_dir: Override for the output directory in the config.
        make_plots: Override for ``plots.enabled``.
        cfg: Pre-loaded configuration; skips reading ``config_path``.
        data: Pre-materialised dataset; skips loading.

    Returns:
        :class:`PipelineResult` with split sizes, metrics and predictions.
    """
    # ------------------------------------------------------------------ #
    # 0. Config                                                           #
    # ------------------------------------------------------------------ #
    if cfg is None:
        cfg = load_config(config_path)
    log_cfg = cfg.get("logging", {})
    _setup_logging(level=log_cfg.get("level", "INFO"), fmt=log_cfg.get("format"))

    if data_path:
        cfg["data"]["raw_path"] = data_path
    if make_plots is None:
        make_plots = bool(cfg["plots"].get("enabled", True))

    out_dir = Path(output_dir or cfg["output"]["dir"])
    fig_dir = out_dir / "figures"
    report_dir = out_dir / "reports"

    target: str = cfg["target"]["column"]
    log_base: float = cfg["target"]["log_base"]
    split_cfg = cfg["split"]
    feat_cfg = cfg["features"]

    logger.info(
        "Pipeline config: data=%s | target=%s | prop=%.2f | seed=%d | plots=%s",
        cfg["data"].get("raw_path") or "built-in",
        target,
        split_cfg["prop"],
        split_cfg["seed"],
        make_plots,
    )

    # ------------------------------------------------------------------ #
    # 1. Materialise                                                      #
    # ------------------------------------------------------------------ #
    df = data.copy() if data is not None else materialize_dataset(cfg["data"])

    # ------------------------------------------------------------------ #
    # 2. Quality checks                                                   #
    # ------------------------------------------------------------------ #
    DataQualityChecker().run_all(df, target=target)

    # ------------------------------------------------------------------ #
    # 3-4. Descriptive and geospatial plots                               #
    # ------------------------------------------------------------------ #
    figures: List[Path] = []
    if make_plots:
        figures.append(
            save_figure(plot_price_distribution(df, target, log_base), fig_dir, "price_distribution")
        )
        figures.append(save_figure(plot_neighborhood_counts(df), fig_dir, "neighborhood_counts"))
        figures.append(
            save_figure(plot_price_by_neighborhood(df, target), fig_dir, "price_by_neighborhood")
        )
        sample = sample_sales(
            df, n=cfg["plots"]["map_sample_size"], seed=cfg["plots"]["map_seed"]
        )
        palette = neighborhood_palette(df["neighborhood"])
        figures.append(save_figure(plot_sales_map(sample, palette=palette), fig_dir, "sales_map"))

    # ------------------------------------------------------------------ #
    # 5. Stratified split                                                 #
    # ------------------------------------------------------------------ #
    split = stratified_split(
        df,
        target=target,
        prop=split_cfg["prop"],
        seed=split_cfg["seed"],
        n_bins=split_cfg.get("n_bins", 4),
    )

    # ------------------------------------------------------------------ #
    # 6. Feature transform – fit on train, apply to both                  #
    # ------------------------------------------------------------------ #
    engineer = FeatureEngineer(
        target=target,
        log_base=log_base,
        other_threshold=feat_cfg["other_threshold"],
        other_label=feat_cfg["other_label"],
        nominal_columns=feat_cfg.get("nominal"),
        numeric_columns=feat_cfg.get("numeric"),
        drop_columns=feat_cfg.get("drop"),
    )
    engineer.fit(split.train)
    for step in engineer.steps_:
        logger.info("Transform step %-15s columns=%s", step.name, list(step.columns))

    X_train = engineer.transform(split.train)
    y_train = engineer.transform_target(split.train)
    X_test = engineer.transform(split.test)
    y_test = engineer.transform_target(split.test)

    logger.info(
        "Feature matrix shapes → train: %s | test: %s", X_train.shape, X_test.shape
    )

    # ------------------------------------------------------------------ #
    # 7. Fit, predict, evaluate                                           #
    # ------------------------------------------------------------------ #
    trainer = OLSTrainer(fit_intercept=cfg["model"].get("fit_intercept", True))
    trainer.fit(X_train, y_train)

    predictor = SalePricePredictor(trainer, engineer)
    predictions = predictor.prediction_frame(X_test, y_test)

    metrics = {
        "train": compute_metrics(y_train, predictor.predict_log(X_train), label="train"),
        "test": compute_metrics(
            predictions["actual_log"], predictions["predicted_log"], label="test"
        ),
    }
    metrics["test"].update(
        compute_price_metrics(
            predictions["actual_price"], predictions["predicted_price"], label="test"
        )
    )

    if make_plots:
        figures.append(
            save_figure(plot_predicted_vs_actual(predictions), fig_dir, "predicted_vs_actual")
        )

    _write_reports(report_dir, metrics, predictions, trainer, X_train, y_train)
    _print_summary(metrics)

    return PipelineResult(
        n_train=len(split.train),
        n_test=len(split.test),
        metrics=metrics,
        predictions=predictions,
        coefficients=trainer.coefficients_,
        figures=figures,
    )


def _write_reports(
    report_dir: Path,
    metrics: Dict[str, Dict[str, float]],
    predictions: pd.DataFrame,
    trainer: OLSTrainer,
    X_train: pd.DataFrame,
    y_train: pd.Series,
) -> None:
    """Write metrics, predictions and the coefficient table as CSV."""
    report_dir.mkdir(parents=True, exist_ok=True)
    metrics_to_dataframe(metrics).to_csv(report_dir / "metrics.csv")
    predictions.to_csv(report_dir / "predictions.csv")
    if X_train.shape[1] + 1 < X_train.shape[0]:
        trainer.coefficient_table(X_train, y_train).to_csv(report_dir / "coefficients.csv")
    else:
        logger.warning("Too few training rows for coefficient inference; writing estimates only.")
        trainer.coefficients_.to_frame().to_csv(report_dir / "coefficients.csv")
    logger.info("Reports written to %s", report_dir)


def _print_summary(metrics: Dict[str, Dict[str, float]]) -> None:
    """Print a formatted table of the split metrics."""
    df = metrics_to_dataframe(metrics)
    logger.info("\n\n=== FINAL RESULTS ===\n%s\n", df.to_string())
    print("\n=== FINAL RESULTS ===")
    print(df.to_string())


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Sale price exploratory analysis and linear regression."
    )
    parser.add_argument(
        "--config",
        default="configs/config.yaml",
        help="Path to YAML config (default: configs/config.yaml).",
    )
    parser.add_argument(
        "--data",
        default=None,
        help="Override raw data path from config (CSV or Excel).",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for figures and reports (default: from config).",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip all figures.",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = _parse_args()
    run_pipeline(
        config_path=args.config,
        data_path=args.data,
        output_dir=args.output_dir,
        make_plots=False if args.no_plots else None,
    )
