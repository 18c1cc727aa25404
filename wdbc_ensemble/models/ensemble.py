"""Majority-vote ensemble over the bank's predictions."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

import numpy as np
import pandas as pd

from wdbc_ensemble import config
from wdbc_ensemble.errors import AlignmentError
from wdbc_ensemble.models.interfaces import PredictionSet

ENSEMBLE_NAME = "ensemble"


class TiePolicy(str, Enum):
    """Label returned when exactly half of an even number of models vote benign.

    NEGATIVE (the default) returns malignant: a split vote never clears a
    sample that some models flag as a possible malignancy.
    """

    NEGATIVE = "negative"
    POSITIVE = "positive"


def _check_aligned(prediction_sets: Sequence[PredictionSet]) -> tuple:
    if len(prediction_sets) == 0:
        raise AlignmentError("Cannot combine an empty collection of predictions")

    reference = prediction_sets[0]
    for ps in prediction_sets[1:]:
        if len(ps) != len(reference):
            raise AlignmentError(
                f"{ps.model_name} has {len(ps)} predictions, "
                f"{reference.model_name} has {len(reference)}"
            )
        if ps.sample_ids != reference.sample_ids:
            raise AlignmentError(
                f"{ps.model_name} and {reference.model_name} predict for "
                f"different sample sequences"
            )
    return reference.sample_ids


def vote_matrix(prediction_sets: Sequence[PredictionSet],
                positive: str = config.POSITIVE_LABEL) -> pd.DataFrame:
    """Boolean samples x models frame, True where a model votes ``positive``."""
    sample_ids = _check_aligned(prediction_sets)
    votes = {ps.model_name: ps.labels == positive for ps in prediction_sets}
    if len(votes) != len(prediction_sets):
        raise AlignmentError("Prediction sets must come from distinct models")
    return pd.DataFrame(votes, index=pd.Index(sample_ids), dtype=bool)


def combine(prediction_sets: Sequence[PredictionSet],
            tie_policy: TiePolicy = TiePolicy.NEGATIVE,
            positive: str = config.POSITIVE_LABEL,
            negative: str = config.NEGATIVE_LABEL,
            name: str = ENSEMBLE_NAME) -> PredictionSet:
    """Majority vote across ``prediction_sets``.

    A sample is labelled ``positive`` when more than half of the N models
    predict it (``2 * votes > N``), ``negative`` when fewer than half do, and
    by ``tie_policy`` when exactly half do.
    """
    tie_policy = TiePolicy(tie_policy)
    sample_ids = _check_aligned(prediction_sets)

    n_models = len(prediction_sets)
    votes = np.column_stack([ps.labels == positive for ps in prediction_sets])
    counts = votes.sum(axis=1).astype(int)

    tie_label = positive if tie_policy is TiePolicy.POSITIVE else negative
    labels = np.where(
        2 * counts > n_models, positive,
        np.where(2 * counts < n_models, negative, tie_label),
    ).astype(object)

    return PredictionSet(model_name=name, sample_ids=sample_ids, labels=labels)
