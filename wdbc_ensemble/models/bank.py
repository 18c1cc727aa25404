"""Model bank: a fixed set of independently trained binary classifiers."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable

import numpy as np
import pandas as pd
from sklearn.discriminant_analysis import (
    LinearDiscriminantAnalysis,
    QuadraticDiscriminantAnalysis,
)
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.neighbors import KNeighborsClassifier
from sklearn.neural_network import MLPClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import SplineTransformer
from sklearn.tree import DecisionTreeClassifier

from wdbc_ensemble import config
from wdbc_ensemble.errors import AlignmentError, ConfigError, DataError, TrainingError
from wdbc_ensemble.models.interfaces import PredictionSet
from wdbc_ensemble.utils import get_logger

log = get_logger(__name__)


def _additive_spline_logit(**params):
    """Generalized additive model: a cubic spline basis per feature, logistic link."""
    return Pipeline([
        ("spline", SplineTransformer(degree=3)),
        ("logit", LogisticRegression(max_iter=5000)),
    ]).set_params(**params)


@dataclass(frozen=True)
class ModelSpec:
    """How to build and tune one member of the bank.

    ``factory`` is called with ``params`` (plus ``random_state`` when
    ``seeded``) to build a fresh estimator. A non-empty ``param_grid`` is
    searched by cross-validation inside ``fit``.
    """

    name: str
    factory: Callable[..., Any]
    params: dict = field(default_factory=dict)
    param_grid: dict = field(default_factory=dict)
    seeded: bool = False
    seed_param: str = "random_state"
    parallel: bool = False
    description: str = ""


# Bank members: name -> spec, in reporting order
MODEL_CONFIGS: dict[str, ModelSpec] = {
    spec.name: spec
    for spec in [
        ModelSpec(
            name="glm",
            factory=LogisticRegression,
            params={"max_iter": 2000, "C": 1.0},
            description="logistic regression",
        ),
        ModelSpec(
            name="lda",
            factory=LinearDiscriminantAnalysis,
            description="linear discriminant analysis",
        ),
        ModelSpec(
            name="qda",
            factory=QuadraticDiscriminantAnalysis,
            params={"reg_param": 0.0},
            description="quadratic discriminant analysis",
        ),
        ModelSpec(
            name="gam_loess",
            factory=_additive_spline_logit,
            param_grid={"spline__n_knots": [3, 4, 5, 6]},
            description="additive model with local spline smoothers",
        ),
        ModelSpec(
            name="knn",
            factory=KNeighborsClassifier,
            param_grid={"n_neighbors": list(range(3, 22, 2))},
            parallel=True,
            description="k-nearest neighbors",
        ),
        ModelSpec(
            name="rf",
            factory=RandomForestClassifier,
            params={"n_estimators": 200},
            param_grid={"max_features": [3, 5, 7, 9]},
            seeded=True,
            parallel=True,
            description="random forest",
        ),
        ModelSpec(
            name="nnet",
            factory=MLPClassifier,
            params={"solver": "lbfgs", "max_iter": 1000},
            param_grid={
                "hidden_layer_sizes": [(1,), (3,), (5,)],
                "alpha": [0.0, 1e-4, 0.1],
            },
            seeded=True,
            description="single hidden layer neural network",
        ),
        ModelSpec(
            name="rpart",
            factory=DecisionTreeClassifier,
            param_grid={"ccp_alpha": [float(round(a, 3)) for a in np.linspace(0.0, 0.05, 26)]},
            seeded=True,
            description="decision tree",
        ),
    ]
}


@dataclass(frozen=True)
class TrainedModel:
    """A classifier bound to one fitted parameter state."""

    name: str
    estimator: Any
    best_params: dict
    cv_accuracy: float | None
    train_accuracy: float
    fit_seconds: float

    def predict(self, features) -> np.ndarray:
        X = np.asarray(features, dtype=float)
        if len(X) == 0:
            return np.empty(0, dtype=object)
        return np.asarray(self.estimator.predict(X), dtype=object)

    def predict_set(self, features: pd.DataFrame) -> PredictionSet:
        """Predict for a feature frame indexed by sample id."""
        return PredictionSet(
            model_name=self.name,
            sample_ids=tuple(features.index),
            labels=self.predict(features),
        )

    def summary(self) -> dict:
        return {
            "name": self.name,
            "best_params": self.best_params,
            "cv_accuracy": self.cv_accuracy,
            "train_accuracy": self.train_accuracy,
            "fit_seconds": self.fit_seconds,
        }


class Classifier:
    """Untrained bank member. ``fit`` returns a new TrainedModel each call."""

    def __init__(self, spec: ModelSpec, seed: int = config.DEFAULT_SEED,
                 cv_folds: int = config.DEFAULT_CV_FOLDS,
                 n_jobs: int = config.DEFAULT_N_JOBS):
        self.spec = spec
        self.seed = seed
        self.cv_folds = cv_folds
        self.n_jobs = n_jobs

    @property
    def name(self) -> str:
        return self.spec.name

    def build_estimator(self):
        params = dict(self.spec.params)
        if self.spec.seeded:
            params[self.spec.seed_param] = self.seed
        if self.spec.parallel:
            params["n_jobs"] = self.n_jobs
        return self.spec.factory(**params)

    def fit(self, features, labels) -> TrainedModel:
        X = np.asarray(features, dtype=float)
        y = np.asarray(labels, dtype=object)
        if X.ndim != 2 or len(X) != len(y):
            raise AlignmentError(
                f"{self.name}: {len(X)} feature rows for {len(y)} labels"
            )
        if not np.isfinite(X).all():
            raise DataError(f"{self.name}: training features must be finite")

        classes, class_sizes = np.unique(y, return_counts=True)
        if len(classes) < 2:
            raise TrainingError(
                f"{self.name}: training subset has {len(classes)} distinct "
                f"label(s) {classes.tolist()}; need 2"
            )

        t0 = time.time()
        try:
            estimator, best_params, cv_accuracy = self._fit_estimator(
                X, y, int(class_sizes.min())
            )
        except (ValueError, np.linalg.LinAlgError) as e:
            raise TrainingError(f"{self.name}: fit failed: {e}") from e
        fit_seconds = time.time() - t0

        train_accuracy = float(np.mean(estimator.predict(X) == y))
        return TrainedModel(
            name=self.name,
            estimator=estimator,
            best_params=best_params,
            cv_accuracy=cv_accuracy,
            train_accuracy=round(train_accuracy, 4),
            fit_seconds=round(fit_seconds, 3),
        )

    def _fit_estimator(self, X, y, smallest_class: int):
        estimator = self.build_estimator()
        folds = min(self.cv_folds, smallest_class)

        if not self.spec.param_grid:
            estimator.fit(X, y)
            return estimator, {}, None

        if folds < 2:
            log.warning(
                "%s: smallest class has %d sample(s), too few to tune; "
                "fitting the first grid point", self.name, smallest_class,
            )
            first = {k: v[0] for k, v in self.spec.param_grid.items()}
            estimator.set_params(**first)
            estimator.fit(X, y)
            return estimator, first, None

        cv = StratifiedKFold(n_splits=folds, shuffle=True, random_state=self.seed)
        search = GridSearchCV(
            estimator,
            self.spec.param_grid,
            scoring="accuracy",
            cv=cv,
            n_jobs=self.n_jobs,
            error_score="raise",
        )
        search.fit(X, y)
        best_params = {
            k: (list(v) if isinstance(v, tuple) else v)
            for k, v in search.best_params_.items()
        }
        return search.best_estimator_, best_params, round(float(search.best_score_), 4)


class ModelBank:
    """Trains the selected bank members on one training subset."""

    def __init__(self, models: list[str] | None = None,
                 seed: int = config.DEFAULT_SEED,
                 cv_folds: int = config.DEFAULT_CV_FOLDS,
                 n_jobs: int = config.DEFAULT_N_JOBS,
                 on_failure: str = "raise"):
        """
        Args:
            models: names from MODEL_CONFIGS to train, or None for all.
            seed: random state for tuning folds and stochastic estimators.
            cv_folds: folds for hyperparameter search.
            n_jobs: parallel jobs passed to scikit-learn.
            on_failure: "raise" aborts on the first TrainingError, "drop"
                excludes the failing model and carries on.
        """
        if models is None:
            models = list(MODEL_CONFIGS.keys())

        unknown = [m for m in models if m not in MODEL_CONFIGS]
        if unknown:
            raise ConfigError(f"Unknown models: {unknown}")
        if not models:
            raise ConfigError("At least one model is required")
        if on_failure not in config.FAILURE_POLICIES:
            raise ConfigError(f"Unknown failure policy: {on_failure}")

        self.model_names = list(models)
        self.on_failure = on_failure
        self.classifiers = [
            Classifier(MODEL_CONFIGS[name], seed=seed, cv_folds=cv_folds, n_jobs=n_jobs)
            for name in self.model_names
        ]

    @staticmethod
    def list_available_models() -> list[str]:
        """Return all available model names."""
        return list(MODEL_CONFIGS.keys())

    def fit_all(self, features, labels) -> dict:
        """Fit every member; returns trained models and failures by name."""
        log.info(
            "Training %d models on %d samples (failure policy: %s)",
            len(self.classifiers), len(features), self.on_failure,
        )

        trained: dict[str, TrainedModel] = {}
        failures: dict[str, str] = {}

        for clf in self.classifiers:
            log.info("Training: %s", clf.name)
            try:
                model = clf.fit(features, labels)
            except TrainingError as e:
                if self.on_failure == "raise":
                    raise
                log.warning("Dropping %s from the ensemble: %s", clf.name, e)
                failures[clf.name] = str(e)
                continue

            trained[clf.name] = model
            log.info(
                "  %s: cv=%s, train=%.4f, params=%s (%.2fs)",
                clf.name,
                "n/a" if model.cv_accuracy is None else f"{model.cv_accuracy:.4f}",
                model.train_accuracy, model.best_params, model.fit_seconds,
            )

        if not trained:
            raise TrainingError(f"Every model failed to train: {failures}")

        return {"trained_models": trained, "failures": failures}

    @staticmethod
    def predict_all(trained_models: dict[str, TrainedModel],
                    features: pd.DataFrame) -> list[PredictionSet]:
        return [model.predict_set(features) for model in trained_models.values()]
