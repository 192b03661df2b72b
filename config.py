# Default settings for the sale price pipeline.
# Values in configs/config.yaml override these section by section.

TARGET = "sale_price"

# None encodes every label-valued column of the loaded dataset.
NOMINAL_FEATURES = None

NUMERIC_FEATURES = [
    "gr_liv_area",
    "lot_area",
    "year_built",
    "year_sold",
    "overall_qual",
    "bedroom_abv_gr",
    "full_bath",
    "garage_cars",
]

# Kept for plotting only; never fed to the model.
GEO_COLUMNS = ["latitude", "longitude"]
DROP_FEATURES = list(GEO_COLUMNS)

RANDOM_STATE = 42
TRAIN_PROP = 0.75
STRATA_BINS = 4

LOG_BASE = 10
OTHER_THRESHOLD = 0.01
OTHER_LABEL = "other"

SYNTHETIC_ROWS = 2930
MAP_SAMPLE_SIZE = 500

DEFAULTS = {
    "data": {
        "raw_path": None,
        "sheet_name": 0,
        "synthetic_rows": SYNTHETIC_ROWS,
        "seed": RANDOM_STATE,
    },
    "target": {
        "column": TARGET,
        "log_base": LOG_BASE,
    },
    "split": {
        "prop": TRAIN_PROP,
        "seed": RANDOM_STATE,
        "n_bins": STRATA_BINS,
    },
    "features": {
        "nominal": NOMINAL_FEATURES,
        "numeric": NUMERIC_FEATURES,
        "drop": DROP_FEATURES,
        "other_threshold": OTHER_THRESHOLD,
        "other_label": OTHER_LABEL,
    },
    "model": {
        "fit_intercept": True,
    },
    "plots": {
        "enabled": True,
        "map_sample_size": MAP_SAMPLE_SIZE,
        "map_seed": RANDOM_STATE,
    },
    "output": {
        "dir": "outputs",
    },
    "logging": {
        "level": "INFO",
        "format": None,
    },
}
