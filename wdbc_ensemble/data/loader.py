"""Dataset loading and validation for the WDBC table."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.datasets import load_breast_cancer

from wdbc_ensemble import config
from wdbc_ensemble.errors import DataError
from wdbc_ensemble.utils import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Dataset:
    """Ordered, validated samples sharing the WDBC feature schema.

    ``frame`` is indexed by sample id and holds the diagnosis column
    followed by the 30 feature columns in file order.
    """

    frame: pd.DataFrame
    name: str = "wdbc"

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def ids(self) -> pd.Index:
        return self.frame.index

    @property
    def labels(self) -> pd.Series:
        return self.frame[config.LABEL_COLUMN]

    @property
    def features(self) -> pd.DataFrame:
        return self.frame[config.FEATURE_COLUMNS]

    @property
    def feature_names(self) -> list[str]:
        return list(config.FEATURE_COLUMNS)

    def class_counts(self) -> dict[str, int]:
        counts = self.labels.value_counts()
        return {label: int(counts.get(label, 0)) for label in config.LABELS}

    def subset(self, ids, name: str | None = None) -> "Dataset":
        """Return the samples with the given ids, in the order given."""
        return Dataset(self.frame.loc[list(ids)], name=name or self.name)

    def metadata(self) -> dict:
        return {
            "name": self.name,
            "n_samples": len(self),
            "n_features": config.N_FEATURES,
            "positive_label": config.POSITIVE_LABEL,
            "negative_label": config.NEGATIVE_LABEL,
            "class_distribution": self.class_counts(),
        }


def validate_frame(df: pd.DataFrame, name: str = "wdbc") -> Dataset:
    """Check a raw table against the schema and wrap it as a Dataset.

    Raises DataError on missing columns, duplicate ids, unknown labels or
    missing / non-numeric / non-finite feature values.
    """
    missing_cols = [c for c in config.COLUMN_NAMES if c not in df.columns]
    if missing_cols:
        raise DataError(f"Missing columns: {missing_cols}")

    df = df[config.COLUMN_NAMES].copy()

    if df[config.ID_COLUMN].isnull().any():
        raise DataError("Sample ids must not be missing")
    dup_ids = df.loc[df[config.ID_COLUMN].duplicated(), config.ID_COLUMN]
    if len(dup_ids) > 0:
        raise DataError(f"Duplicate sample ids: {sorted(dup_ids.unique().tolist())[:10]}")

    labels = df[config.LABEL_COLUMN].astype("string").str.strip()
    bad_labels = sorted(set(labels.dropna()) - set(config.LABELS))
    if labels.isnull().any() or bad_labels:
        raise DataError(
            f"Diagnosis must be one of {list(config.LABELS)}; "
            f"found {bad_labels or 'missing values'}"
        )
    df[config.LABEL_COLUMN] = labels.astype(object)

    features = df[config.FEATURE_COLUMNS].apply(pd.to_numeric, errors="coerce")
    bad_cells = features.isnull() & df[config.FEATURE_COLUMNS].notnull()
    if bad_cells.any().any():
        cols = bad_cells.columns[bad_cells.any()].tolist()
        raise DataError(f"Non-numeric feature values in columns: {cols}")
    if features.isnull().any().any():
        cols = features.columns[features.isnull().any()].tolist()
        raise DataError(f"Missing feature values in columns: {cols}")
    if not np.isfinite(features.to_numpy(dtype=float)).all():
        raise DataError("Feature values must be finite")
    df[config.FEATURE_COLUMNS] = features.astype(float)

    df = df.set_index(config.ID_COLUMN)
    return Dataset(df, name=name)


def _load_bundled_wdbc() -> pd.DataFrame:
    """scikit-learn's copy of the table, mapped onto the file schema.

    The bundled copy carries no sample ids, so rows are numbered from 1.
    Its feature order (mean, error, worst) matches the file.
    """
    raw = load_breast_cancer()
    df = pd.DataFrame(raw.data, columns=config.FEATURE_COLUMNS)
    # bundled target: 0 = malignant, 1 = benign
    diagnosis = np.where(raw.target == 1, config.BENIGN, config.MALIGNANT)
    df.insert(0, config.LABEL_COLUMN, diagnosis)
    df.insert(0, config.ID_COLUMN, np.arange(1, len(df) + 1))
    return df


# Registry of available datasets
DATASET_REGISTRY = {
    "wdbc": {
        "loader": _load_bundled_wdbc,
        "description": "Wisconsin Diagnostic Breast Cancer (569 samples, 30 features)",
    },
}


class DatasetLoader:
    """Loads the WDBC table from the registry or a local file."""

    @staticmethod
    def list_available() -> list[str]:
        """Return names of all available datasets."""
        return list(DATASET_REGISTRY.keys())

    def load(self, name: str = "wdbc") -> Dataset:
        """Load a registered dataset by name."""
        if name not in DATASET_REGISTRY:
            raise DataError(
                f"Unknown dataset '{name}'. "
                f"Available: {self.list_available()}"
            )

        entry = DATASET_REGISTRY[name]
        log.info("Loading dataset: %s", name)
        log.info("Description: %s", entry["description"])

        dataset = validate_frame(entry["loader"](), name=name)
        self._log_loaded(dataset)
        return dataset

    def load_csv(self, path: str | Path) -> Dataset:
        """Load a headerless delimited file: id, diagnosis, 30 features."""
        path = Path(path)
        log.info("Loading WDBC file from: %s", path)
        if not path.is_file():
            raise DataError(f"Data file not found: {path}")

        try:
            df = pd.read_csv(path, header=None, skipinitialspace=True)
        except pd.errors.EmptyDataError as e:
            raise DataError(f"Data file is empty: {path}") from e
        except pd.errors.ParserError as e:
            raise DataError(f"Could not parse {path}: {e}") from e

        if df.shape[1] != len(config.COLUMN_NAMES):
            raise DataError(
                f"Expected {len(config.COLUMN_NAMES)} columns, found {df.shape[1]}"
            )
        df.columns = config.COLUMN_NAMES

        dataset = validate_frame(df, name=path.stem)
        self._log_loaded(dataset)
        return dataset

    @staticmethod
    def _log_loaded(dataset: Dataset) -> None:
        counts = dataset.class_counts()
        log.info(
            "Loaded %d samples with %d features (%d %s / %d %s)",
            len(dataset), config.N_FEATURES,
            counts[config.BENIGN], config.BENIGN,
            counts[config.MALIGNANT], config.MALIGNANT,
        )
