"""Feature centering/scaling and assembly of model-ready matrices."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from wdbc_ensemble import config
from wdbc_ensemble.data.loader import Dataset
from wdbc_ensemble.data.splitter import Split
from wdbc_ensemble.errors import ConfigError, DataError
from wdbc_ensemble.utils import get_logger

log = get_logger(__name__)


def _feature_frame(data: Dataset | pd.DataFrame) -> pd.DataFrame:
    frame = data.features if isinstance(data, Dataset) else data
    if list(frame.columns) != config.FEATURE_COLUMNS:
        raise DataError("Feature columns do not match the WDBC schema")
    values = frame.to_numpy(dtype=float)
    if np.isnan(values).any():
        raise DataError("Feature matrix contains missing values")
    if not np.isfinite(values).all():
        raise DataError("Feature matrix contains non-finite values")
    return frame


class FeatureScaler:
    """Centers and scales features with statistics from one reference set.

    The statistics are fixed by ``fit`` and reused unchanged by every later
    ``transform``.
    """

    def __init__(self):
        self._scaler = None

    @property
    def fitted(self) -> bool:
        return self._scaler is not None

    @property
    def means(self) -> pd.Series:
        self._check_fitted()
        return pd.Series(self._scaler.mean_, index=config.FEATURE_COLUMNS)

    @property
    def scales(self) -> pd.Series:
        self._check_fitted()
        return pd.Series(self._scaler.scale_, index=config.FEATURE_COLUMNS)

    def fit(self, data: Dataset | pd.DataFrame) -> "FeatureScaler":
        frame = _feature_frame(data)
        if len(frame) == 0:
            raise DataError("Cannot compute scaling statistics from zero samples")
        self._scaler = StandardScaler().fit(frame.to_numpy(dtype=float))
        return self

    def transform(self, data: Dataset | pd.DataFrame) -> pd.DataFrame:
        self._check_fitted()
        frame = _feature_frame(data)
        if len(frame) == 0:
            return frame.astype(float)
        scaled = self._scaler.transform(frame.to_numpy(dtype=float))
        return pd.DataFrame(scaled, index=frame.index, columns=frame.columns)

    def _check_fitted(self):
        if self._scaler is None:
            raise ConfigError("FeatureScaler must be fit before use")


@dataclass
class PreparedData:
    """Scaled feature matrices and labels for each subset of a split."""

    X_train: pd.DataFrame
    X_test: pd.DataFrame
    X_val: pd.DataFrame
    y_train: pd.Series
    y_test: pd.Series
    y_val: pd.Series
    scaler: FeatureScaler
    info: dict = field(default_factory=dict)


class Preprocessor:
    """Scales every subset of a split with one set of statistics.

    ``scaling_scope="training"`` takes the statistics from the training
    subset alone. ``"full"`` takes them from the whole dataset before the
    split, which leaks held-out information but reproduces the numbers of
    the original study.
    """

    def __init__(self, scaling_scope: str = "training"):
        if scaling_scope not in config.SCALING_SCOPES:
            raise ConfigError(
                f"Unknown scaling scope '{scaling_scope}'. "
                f"Available: {list(config.SCALING_SCOPES)}"
            )
        self.scaling_scope = scaling_scope
        self.scaler = FeatureScaler()

    def run(self, dataset: Dataset, split: Split) -> PreparedData:
        log.info("Starting preprocessing (scaling scope: %s)", self.scaling_scope)

        reference = split.training if self.scaling_scope == "training" else dataset
        self.scaler.fit(reference)
        if self.scaling_scope == "full":
            log.warning(
                "Scaling statistics computed on all %d samples, including "
                "testing and validation subsets", len(dataset),
            )

        prepared = PreparedData(
            X_train=self.scaler.transform(split.training),
            X_test=self.scaler.transform(split.testing),
            X_val=self.scaler.transform(split.validation),
            y_train=split.training.labels,
            y_test=split.testing.labels,
            y_val=split.validation.labels,
            scaler=self.scaler,
            info={
                "scaling": "standard",
                "scaling_scope": self.scaling_scope,
                "scaling_reference_samples": len(reference),
                "split_seed": split.seed,
                **{f"{k}_samples": v for k, v in split.sizes().items()},
                "class_counts": split.class_counts(),
            },
        )
        log.info(
            "Scaled %d features for %d / %d / %d samples",
            config.N_FEATURES, len(prepared.X_train),
            len(prepared.X_test), len(prepared.X_val),
        )
        return prepared
