"""Prediction record shared by the model bank, ensemble and evaluator."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from wdbc_ensemble.errors import AlignmentError


@dataclass(frozen=True, eq=False)
class PredictionSet:
    """One model's predicted labels, aligned positionally with ``sample_ids``."""

    model_name: str
    sample_ids: tuple
    labels: np.ndarray

    def __post_init__(self):
        labels = np.asarray(self.labels, dtype=object)
        if labels.ndim != 1:
            raise AlignmentError("PredictionSet labels must be one-dimensional")
        sample_ids = tuple(self.sample_ids)
        if len(sample_ids) != len(labels):
            raise AlignmentError(
                f"{self.model_name}: {len(labels)} labels for {len(sample_ids)} samples"
            )
        object.__setattr__(self, "sample_ids", sample_ids)
        object.__setattr__(self, "labels", labels)

    def __len__(self) -> int:
        return len(self.labels)

    def to_series(self) -> pd.Series:
        return pd.Series(self.labels, index=pd.Index(self.sample_ids), name=self.model_name)
