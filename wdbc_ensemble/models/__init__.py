from wdbc_ensemble.models.bank import (
    MODEL_CONFIGS,
    Classifier,
    ModelBank,
    ModelSpec,
    TrainedModel,
)
from wdbc_ensemble.models.ensemble import TiePolicy, combine, vote_matrix
from wdbc_ensemble.models.interfaces import PredictionSet

__all__ = [
    "MODEL_CONFIGS",
    "Classifier",
    "ModelBank",
    "ModelSpec",
    "PredictionSet",
    "TiePolicy",
    "TrainedModel",
    "combine",
    "vote_matrix",
]
