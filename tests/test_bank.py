import numpy as np
import pytest

from wdbc_ensemble import config
from wdbc_ensemble.errors import AlignmentError, ConfigError, TrainingError
from wdbc_ensemble.models import MODEL_CONFIGS, Classifier, ModelBank


def classifier(name, **kwargs):
    return Classifier(MODEL_CONFIGS[name], **kwargs)


class TestClassifier:
    def test_single_class_training_set_raises(self, dataset):
        benign = dataset.labels == config.BENIGN
        X = dataset.features[benign]
        y = dataset.labels[benign]
        with pytest.raises(TrainingError, match="distinct"):
            classifier("glm").fit(X, y)

    def test_fit_predict_contract(self, prepared):
        model = classifier("glm").fit(prepared.X_train, prepared.y_train)
        predicted = model.predict(prepared.X_test)
        assert len(predicted) == len(prepared.X_test)
        assert set(predicted) <= set(config.LABELS)
        assert np.mean(predicted == prepared.y_test.to_numpy()) > 0.9

    def test_predict_set_carries_sample_ids(self, prepared):
        model = classifier("lda").fit(prepared.X_train, prepared.y_train)
        ps = model.predict_set(prepared.X_val)
        assert ps.model_name == "lda"
        assert ps.sample_ids == tuple(prepared.X_val.index)

    def test_predict_on_zero_rows(self, prepared):
        model = classifier("knn").fit(prepared.X_train, prepared.y_train)
        ps = model.predict_set(prepared.X_test.iloc[:0])
        assert len(ps) == 0
        assert ps.sample_ids == ()

    def test_tuning_is_encapsulated(self, prepared):
        model = classifier("knn").fit(prepared.X_train, prepared.y_train)
        assert model.best_params["n_neighbors"] in MODEL_CONFIGS["knn"].param_grid["n_neighbors"]
        assert 0.0 <= model.cv_accuracy <= 1.0

    def test_refit_produces_new_model(self, prepared):
        clf = classifier("rpart")
        first = clf.fit(prepared.X_train, prepared.y_train)
        second = clf.fit(prepared.X_train.iloc[:30], prepared.y_train.iloc[:30])
        assert first.estimator is not second.estimator
        with pytest.raises(Exception):
            first.name = "changed"

    def test_seeded_models_are_reproducible(self, prepared):
        a = classifier("rf", seed=3).fit(prepared.X_train, prepared.y_train)
        b = classifier("rf", seed=3).fit(prepared.X_train, prepared.y_train)
        np.testing.assert_array_equal(a.predict(prepared.X_test), b.predict(prepared.X_test))
        assert a.best_params == b.best_params

    def test_misaligned_inputs(self, prepared):
        with pytest.raises(AlignmentError):
            classifier("glm").fit(prepared.X_train, prepared.y_train.iloc[:-1])

    def test_tiny_class_skips_tuning(self, prepared):
        y = prepared.y_train.copy()
        malignant = y.index[y == config.MALIGNANT]
        keep = y.index[y == config.BENIGN].append(malignant[:1])
        model = classifier("rpart").fit(prepared.X_train.loc[keep], y.loc[keep])
        assert model.cv_accuracy is None
        assert model.best_params == {"ccp_alpha": 0.0}

    @pytest.mark.parametrize("name", list(MODEL_CONFIGS))
    def test_every_member_fits(self, dataset, name):
        X = dataset.features.to_numpy()
        X = (X - X.mean(axis=0)) / X.std(axis=0)
        model = classifier(name, cv_folds=3).fit(X, dataset.labels)
        assert set(model.predict(X)) <= set(config.LABELS)
        assert model.train_accuracy > 0.8


class TestModelBank:
    def test_unknown_model(self):
        with pytest.raises(ConfigError, match="Unknown models"):
            ModelBank(models=["glm", "svm"])

    def test_unknown_failure_policy(self):
        with pytest.raises(ConfigError):
            ModelBank(models=["glm"], on_failure="ignore")

    def test_defaults_to_every_member(self):
        assert ModelBank().model_names == list(MODEL_CONFIGS)

    def test_fit_all_in_bank_order(self, prepared):
        bank = ModelBank(models=["lda", "glm", "knn"])
        out = bank.fit_all(prepared.X_train, prepared.y_train)
        assert list(out["trained_models"]) == ["lda", "glm", "knn"]
        assert out["failures"] == {}

        sets = ModelBank.predict_all(out["trained_models"], prepared.X_test)
        assert [ps.model_name for ps in sets] == ["lda", "glm", "knn"]

    def _break(self, bank, name):
        def boom(features, labels):
            raise TrainingError(f"{name}: broken")
        for clf in bank.classifiers:
            if clf.name == name:
                clf.fit = boom

    def test_raise_policy_aborts(self, prepared):
        bank = ModelBank(models=["glm", "lda"], on_failure="raise")
        self._break(bank, "lda")
        with pytest.raises(TrainingError, match="broken"):
            bank.fit_all(prepared.X_train, prepared.y_train)

    def test_drop_policy_excludes_model(self, prepared):
        bank = ModelBank(models=["glm", "lda"], on_failure="drop")
        self._break(bank, "lda")
        out = bank.fit_all(prepared.X_train, prepared.y_train)
        assert list(out["trained_models"]) == ["glm"]
        assert "lda" in out["failures"]

    def test_drop_policy_with_every_model_failing(self, prepared):
        bank = ModelBank(models=["glm"], on_failure="drop")
        self._break(bank, "glm")
        with pytest.raises(TrainingError, match="Every model failed"):
            bank.fit_all(prepared.X_train, prepared.y_train)
