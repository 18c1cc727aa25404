"""Configuration constants and per-run settings for the ensemble pipeline."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

from wdbc_ensemble.errors import ConfigError

# Output
DEFAULT_OUTPUT_DIR = "wdbc_output"

# Column schema of the headerless WDBC file: id, diagnosis, then the ten
# base measurements aggregated as mean, standard error and worst value.
BASE_MEASUREMENTS = [
    "radius",
    "texture",
    "perimeter",
    "area",
    "smoothness",
    "compactness",
    "concavity",
    "concave_points",
    "symmetry",
    "fractal_dimension",
]
AGGREGATES = ["mean", "se", "worst"]

ID_COLUMN = "id"
LABEL_COLUMN = "diagnosis"
FEATURE_COLUMNS = [
    f"{measurement}_{aggregate}"
    for aggregate in AGGREGATES
    for measurement in BASE_MEASUREMENTS
]
COLUMN_NAMES = [ID_COLUMN, LABEL_COLUMN] + FEATURE_COLUMNS
N_FEATURES = len(FEATURE_COLUMNS)  # 30

# Class labels. Benign is the positive class throughout.
BENIGN = "B"
MALIGNANT = "M"
POSITIVE_LABEL = BENIGN
NEGATIVE_LABEL = MALIGNANT
LABELS = (BENIGN, MALIGNANT)

# Reproducibility
DEFAULT_SEED = 1

# Nested holdouts: 20% validation, then 20% of the remainder for testing
DEFAULT_VALIDATION_FRACTION = 0.2
DEFAULT_TEST_FRACTION_OF_REMAINDER = 0.2

# Model tuning
DEFAULT_CV_FOLDS = 5
DEFAULT_N_JOBS = 1

# Where feature scaling statistics are computed from
SCALING_SCOPES = ("training", "full")
FAILURE_POLICIES = ("raise", "drop")
# Label for an exact half-and-half ensemble vote: "negative" is malignant
TIE_POLICIES = ("negative", "positive")

# Principal component analysis
PCA_VARIANCE_TARGET = 0.9
HIGH_CORRELATION_THRESHOLD = 0.9


@dataclass(frozen=True)
class PipelineConfig:
    """Settings for one pipeline run, validated on construction."""

    dataset: str = "wdbc"
    data_file: str | None = None
    models: tuple[str, ...] | None = None
    seed: int = DEFAULT_SEED
    validation_fraction: float = DEFAULT_VALIDATION_FRACTION
    # share of what remains after the validation holdout
    test_fraction: float = DEFAULT_TEST_FRACTION_OF_REMAINDER
    cv_folds: int = DEFAULT_CV_FOLDS
    scaling_scope: str = "training"
    on_model_failure: str = "raise"
    tie_policy: str = "negative"
    n_jobs: int = DEFAULT_N_JOBS
    output_dir: str = DEFAULT_OUTPUT_DIR

    def __post_init__(self):
        for name in ("validation_fraction", "test_fraction"):
            value = getattr(self, name)
            if not math.isfinite(value) or not 0.0 <= value < 1.0:
                raise ConfigError(f"{name} must be in [0, 1), got {value!r}")
        if self.cv_folds < 2:
            raise ConfigError(f"cv_folds must be at least 2, got {self.cv_folds}")
        if self.scaling_scope not in SCALING_SCOPES:
            raise ConfigError(
                f"Unknown scaling scope '{self.scaling_scope}'. "
                f"Available: {list(SCALING_SCOPES)}"
            )
        if self.on_model_failure not in FAILURE_POLICIES:
            raise ConfigError(
                f"Unknown model failure policy '{self.on_model_failure}'. "
                f"Available: {list(FAILURE_POLICIES)}"
            )
        if self.tie_policy not in TIE_POLICIES:
            raise ConfigError(
                f"Unknown tie policy '{self.tie_policy}'. "
                f"Available: {list(TIE_POLICIES)}"
            )

    def to_dict(self) -> dict:
        out = asdict(self)
        if out["models"] is not None:
            out["models"] = list(out["models"])
        return out
