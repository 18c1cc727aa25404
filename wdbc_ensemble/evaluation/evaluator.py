"""Confusion-matrix evaluation of single models and the ensemble."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from wdbc_ensemble import config
from wdbc_ensemble.data.preprocessor import PreparedData
from wdbc_ensemble.errors import AlignmentError, DataError
from wdbc_ensemble.models.bank import ModelBank, TrainedModel
from wdbc_ensemble.models.ensemble import ENSEMBLE_NAME, TiePolicy, combine
from wdbc_ensemble.models.interfaces import PredictionSet
from wdbc_ensemble.utils import get_logger

log = get_logger(__name__)


def _ratio(num: int, den: int) -> float:
    return num / den if den else math.nan


@dataclass(frozen=True)
class ConfusionMatrix:
    """2x2 outcome counts with the positive class taken as ``positive``."""

    tp: int
    tn: int
    fp: int
    fn: int
    positive: str = config.POSITIVE_LABEL
    negative: str = config.NEGATIVE_LABEL

    @property
    def n(self) -> int:
        return self.tp + self.tn + self.fp + self.fn

    @property
    def accuracy(self) -> float:
        return _ratio(self.tp + self.tn, self.n)

    @property
    def sensitivity(self) -> float:
        return _ratio(self.tp, self.tp + self.fn)

    @property
    def specificity(self) -> float:
        return _ratio(self.tn, self.tn + self.fp)

    @property
    def balanced_accuracy(self) -> float:
        return (self.sensitivity + self.specificity) / 2

    @property
    def prevalence(self) -> float:
        return _ratio(self.tp + self.fn, self.n)

    @property
    def ppv(self) -> float:
        return _ratio(self.tp, self.tp + self.fp)

    @property
    def npv(self) -> float:
        return _ratio(self.tn, self.tn + self.fn)

    def to_dict(self) -> dict:
        return {
            "positive": self.positive,
            "negative": self.negative,
            "tp": self.tp,
            "tn": self.tn,
            "fp": self.fp,
            "fn": self.fn,
            "accuracy": self.accuracy,
            "sensitivity": self.sensitivity,
            "specificity": self.specificity,
            "balanced_accuracy": self.balanced_accuracy,
            "prevalence": self.prevalence,
            "ppv": self.ppv,
            "npv": self.npv,
        }


def evaluate(predictions, true_labels,
             positive: str = config.POSITIVE_LABEL,
             negative: str = config.NEGATIVE_LABEL) -> ConfusionMatrix:
    """Compare predicted labels with the truth, position by position.

    When ``predictions`` is a PredictionSet and ``true_labels`` a Series
    indexed by sample id, the two id sequences must also match. Metrics
    whose denominator is zero come back as NaN.
    """
    if isinstance(predictions, PredictionSet):
        pred = predictions.labels
        if isinstance(true_labels, pd.Series) and len(true_labels) == len(pred):
            if tuple(true_labels.index) != predictions.sample_ids:
                raise AlignmentError(
                    f"{predictions.model_name}: prediction ids do not match "
                    f"the order of the true labels"
                )
    else:
        pred = np.asarray(predictions, dtype=object)
    truth = np.asarray(true_labels, dtype=object)

    if pred.ndim != 1 or truth.ndim != 1 or len(pred) != len(truth):
        raise AlignmentError(
            f"{len(pred)} predictions for {len(truth)} true labels"
        )

    known = {positive, negative}
    unknown = sorted({str(v) for v in np.concatenate([pred, truth])} - known)
    if unknown:
        raise DataError(f"Labels must be one of {sorted(known)}; found {unknown}")

    if len(truth) == 0:
        return ConfusionMatrix(0, 0, 0, 0, positive=positive, negative=negative)

    tn, fp, fn, tp = confusion_matrix(truth, pred, labels=[negative, positive]).ravel()
    return ConfusionMatrix(
        tp=int(tp), tn=int(tn), fp=int(fp), fn=int(fn),
        positive=positive, negative=negative,
    )


class ModelEvaluator:
    """Scores every trained model and the ensemble on testing, then validation."""

    def __init__(self, tie_policy: TiePolicy = TiePolicy.NEGATIVE):
        self.tie_policy = TiePolicy(tie_policy)

    def run(self, trained_models: dict[str, TrainedModel],
            prepared: PreparedData) -> dict:
        """
        Returns a dict with the results table, the best single model name,
        and confusion reports for the best model and the ensemble on each
        non-empty subset (testing, validation).
        """
        log.info(
            "Evaluating %d models on %d testing samples",
            len(trained_models), len(prepared.X_test),
        )

        test_sets = ModelBank.predict_all(trained_models, prepared.X_test)
        test_ensemble = combine(test_sets, tie_policy=self.tie_policy)

        per_model = {}
        for ps in test_sets + [test_ensemble]:
            cm = evaluate(ps, prepared.y_test)
            per_model[ps.model_name] = cm
            log.info(
                "  %s: acc=%.4f, sens=%.4f, spec=%.4f",
                ps.model_name, cm.accuracy, cm.sensitivity, cm.specificity,
            )

        results = pd.DataFrame(
            [{"model": name, "accuracy": cm.accuracy} for name, cm in per_model.items()]
        )

        if len(prepared.X_test) > 0:
            best_name = self._best_model(per_model)
            log.info(
                "Best single model on testing: %s (accuracy=%.4f)",
                best_name, per_model[best_name].accuracy,
            )
        else:
            best_name = self._best_model_by_training(trained_models)
            log.warning(
                "No testing samples; best single model by cross-validation: %s",
                best_name,
            )

        reports = {}
        if len(prepared.X_test) > 0:
            reports["testing"] = {
                best_name: per_model[best_name],
                ENSEMBLE_NAME: per_model[ENSEMBLE_NAME],
            }

        if len(prepared.X_val) > 0:
            log.info("Final check on %d validation samples", len(prepared.X_val))
            val_sets = ModelBank.predict_all(trained_models, prepared.X_val)
            val_ensemble = combine(val_sets, tie_policy=self.tie_policy)
            val_best = next(ps for ps in val_sets if ps.model_name == best_name)
            reports["validation"] = {
                best_name: evaluate(val_best, prepared.y_val),
                ENSEMBLE_NAME: evaluate(val_ensemble, prepared.y_val),
            }
            for name, cm in reports["validation"].items():
                log.info(
                    "  validation %s: acc=%.4f, balanced=%.4f",
                    name, cm.accuracy, cm.balanced_accuracy,
                )
        else:
            log.warning("No validation samples; skipping the final check")

        return {
            "results_table": results,
            "testing_confusion": per_model,
            "best_model_name": best_name,
            "reports": reports,
            "tie_policy": self.tie_policy.value,
            "top_features": self._get_feature_importance(
                trained_models[best_name].estimator, config.FEATURE_COLUMNS
            )[:10],
        }

    @staticmethod
    def _best_model(per_model: dict[str, ConfusionMatrix]) -> str:
        """Highest testing accuracy; earlier bank members win ties."""
        best_name, best_acc = None, -1.0
        for name, cm in per_model.items():
            if name == ENSEMBLE_NAME:
                continue
            acc = -1.0 if math.isnan(cm.accuracy) else cm.accuracy
            if acc > best_acc:
                best_name, best_acc = name, acc
        return best_name

    @staticmethod
    def _best_model_by_training(trained_models: dict[str, TrainedModel]) -> str:
        """Highest cross-validation accuracy (training accuracy for untuned models)."""
        def score(model: TrainedModel) -> float:
            return model.train_accuracy if model.cv_accuracy is None else model.cv_accuracy

        best_name, best_score = None, -1.0
        for name, model in trained_models.items():
            if score(model) > best_score:
                best_name, best_score = name, score(model)
        return best_name

    def _get_feature_importance(self, model, feature_names: list[str]) -> list[dict]:
        """Extract feature importances from a model if supported."""
        importances = None

        if hasattr(model, "feature_importances_"):
            importances = model.feature_importances_
        elif hasattr(model, "coef_"):
            importances = np.abs(model.coef_).flatten()

        if importances is None or len(importances) != len(feature_names):
            return []

        paired = list(zip(feature_names, importances))
        paired.sort(key=lambda x: x[1], reverse=True)

        return [
            {"feature": name, "importance": round(float(imp), 6)}
            for name, imp in paired
        ]
