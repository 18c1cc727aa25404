import pytest

from wdbc_ensemble import config
from wdbc_ensemble.data import SplitFractions, split, validate_frame
from wdbc_ensemble.errors import ConfigError

from conftest import make_frame


def id_sets(s):
    return set(s.training.ids), set(s.testing.ids), set(s.validation.ids)


class TestSplitFractions:
    def test_nested_converts_to_absolute_shares(self):
        f = SplitFractions.nested(0.2, 0.2)
        assert f.validation == pytest.approx(0.2)
        assert f.test == pytest.approx(0.16)
        assert f.training == pytest.approx(0.64)

    @pytest.mark.parametrize("validation,test", [(0.6, 0.5), (-0.1, 0.2), (0.2, float("nan"))])
    def test_invalid_fractions(self, dataset, validation, test):
        with pytest.raises(ConfigError):
            split(dataset, SplitFractions(validation=validation, test=test), seed=1)


class TestSplitInvariants:
    @pytest.mark.parametrize("seed", [0, 1, 7, 123])
    def test_disjoint_and_complete(self, dataset, seed):
        train, test, val = id_sets(split(dataset, SplitFractions(), seed=seed))
        assert not train & test
        assert not train & val
        assert not test & val
        assert train | test | val == set(dataset.ids)

    def test_same_seed_same_partition(self, dataset):
        a = split(dataset, SplitFractions(), seed=42)
        b = split(dataset, SplitFractions(), seed=42)
        assert list(a.training.ids) == list(b.training.ids)
        assert list(a.testing.ids) == list(b.testing.ids)
        assert list(a.validation.ids) == list(b.validation.ids)

    def test_different_seed_changes_partition(self, dataset):
        a = split(dataset, SplitFractions(), seed=1)
        b = split(dataset, SplitFractions(), seed=2)
        assert set(a.validation.ids) != set(b.validation.ids)

    def test_stratified_counts(self, dataset):
        s = split(dataset, SplitFractions.nested(0.2, 0.2), seed=3)
        counts = s.class_counts()
        # 60 benign / 40 malignant
        assert counts["validation"] == {config.BENIGN: 12, config.MALIGNANT: 8}
        assert counts["testing"] == {config.BENIGN: 10, config.MALIGNANT: 6}
        assert counts["training"] == {config.BENIGN: 38, config.MALIGNANT: 26}

    def test_subsets_keep_source_order(self, dataset):
        s = split(dataset, SplitFractions(), seed=5)
        positions = [dataset.ids.get_loc(i) for i in s.training.ids]
        assert positions == sorted(positions)

    def test_bundled_proportions(self):
        from wdbc_ensemble.data import DatasetLoader

        ds = DatasetLoader().load("wdbc")
        s = split(ds, SplitFractions.nested(0.2, 0.2), seed=1)
        source_share = ds.class_counts()[config.BENIGN] / len(ds)
        for subset in (s.training, s.testing, s.validation):
            share = subset.class_counts()[config.BENIGN] / len(subset)
            assert share == pytest.approx(source_share, abs=0.02)


class TestDegenerateInputs:
    def test_empty_dataset(self):
        empty = validate_frame(make_frame(2, 2).iloc[:0])
        with pytest.raises(ConfigError, match="empty"):
            split(empty, SplitFractions(), seed=1)

    def test_single_class(self):
        ds = validate_frame(make_frame(10, 0))
        with pytest.raises(ConfigError, match="both classes"):
            split(ds, SplitFractions(), seed=1)

    def test_class_too_small_for_three_subsets(self):
        ds = validate_frame(make_frame(20, 2))
        with pytest.raises(ConfigError, match="at least 3"):
            split(ds, SplitFractions(), seed=1)

    def test_two_samples_without_holdouts(self):
        ds = validate_frame(make_frame(1, 1))
        s = split(ds, SplitFractions(validation=0.0, test=0.0), seed=1)
        assert s.sizes() == {"training": 2, "testing": 0, "validation": 0}
        assert s.training.class_counts() == {config.BENIGN: 1, config.MALIGNANT: 1}

    @pytest.mark.parametrize("fractions", [
        SplitFractions(),
        SplitFractions(validation=0.5, test=0.0),
        SplitFractions(validation=0.0, test=0.3),
    ])
    def test_two_samples_with_holdouts(self, fractions):
        ds = validate_frame(make_frame(1, 1))
        with pytest.raises(ConfigError):
            split(ds, fractions, seed=1)

    def test_holdouts_leave_no_training(self):
        ds = validate_frame(make_frame(10, 10))
        with pytest.raises(ConfigError, match="none for training"):
            split(ds, SplitFractions(validation=0.5, test=0.5), seed=1)
