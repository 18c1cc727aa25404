import itertools

import numpy as np
import pytest

from wdbc_ensemble.errors import AlignmentError
from wdbc_ensemble.evaluation import evaluate
from wdbc_ensemble.models import PredictionSet, TiePolicy, combine, vote_matrix

B, M = "B", "M"
IDS = ("s1", "s2", "s3", "s4", "s5")


def pset(name, labels, ids=IDS):
    return PredictionSet(model_name=name, sample_ids=ids, labels=labels)


class TestCombine:
    def test_worked_example(self):
        truth = [B, B, M, M, B]
        sets = [
            pset("m1", [B, B, M, M, B]),
            pset("m2", [B, M, M, M, B]),
            pset("m3", [B, B, B, M, B]),
        ]
        votes = vote_matrix(sets)
        assert votes.sum(axis=1).tolist() == [3, 2, 1, 0, 3]

        ensemble = combine(sets)
        assert list(ensemble.labels) == [B, B, M, M, B]
        assert ensemble.sample_ids == IDS
        assert evaluate(ensemble, truth).accuracy == 1.0

    def test_even_split_resolves_to_malignant(self):
        sets = [pset("a", [B, M, B, M, B]), pset("b", [M, B, B, M, M])]
        assert list(combine(sets).labels) == [M, M, B, M, M]

    def test_four_models_two_votes_each(self):
        sets = [
            pset("a", [B] * 5),
            pset("b", [B] * 5),
            pset("c", [M] * 5),
            pset("d", [M] * 5),
        ]
        assert list(combine(sets).labels) == [M] * 5
        assert list(combine(sets, tie_policy=TiePolicy.POSITIVE).labels) == [B] * 5

    def test_tie_policy_accepts_value_string(self):
        sets = [pset("a", [B] * 5), pset("b", [M] * 5)]
        assert list(combine(sets, tie_policy="positive").labels) == [B] * 5
        with pytest.raises(ValueError):
            combine(sets, tie_policy="coin_flip")

    @pytest.mark.parametrize("n_models", [1, 3, 5, 7])
    def test_odd_count_is_plain_majority(self, n_models):
        rng = np.random.default_rng(n_models)
        sets = [pset(f"m{i}", rng.choice([B, M], size=5)) for i in range(n_models)]
        counts = vote_matrix(sets).sum(axis=1).to_numpy()
        assert not np.any(2 * counts == n_models)

        expected = [B if 2 * c > n_models else M for c in counts]
        for policy in TiePolicy:
            assert list(combine(sets, tie_policy=policy).labels) == expected

    def test_every_even_tie_pattern(self):
        # all ways for 2 of 4 models to vote benign on a single sample
        for benign_models in itertools.combinations(range(4), 2):
            sets = [
                pset(f"m{i}", [B if i in benign_models else M], ids=("x",))
                for i in range(4)
            ]
            assert list(combine(sets).labels) == [M]

    def test_pure(self):
        sets = [pset("a", [B, M, B, M, B]), pset("b", [B, B, M, M, B]), pset("c", [M, M, B, B, B])]
        snapshot = [ps.labels.copy() for ps in sets]
        first = combine(sets)
        second = combine(sets)
        assert list(first.labels) == list(second.labels)
        for ps, before in zip(sets, snapshot):
            assert list(ps.labels) == list(before)

    def test_empty_input(self):
        out = combine([pset("a", [], ids=()), pset("b", [], ids=())])
        assert len(out) == 0


class TestAlignment:
    def test_no_prediction_sets(self):
        with pytest.raises(AlignmentError):
            combine([])

    def test_unequal_lengths(self):
        sets = [pset("a", [B] * 5), pset("b", [B] * 4, ids=IDS[:4])]
        with pytest.raises(AlignmentError, match="predictions"):
            combine(sets)

    def test_different_sample_order(self):
        sets = [pset("a", [B] * 5), pset("b", [B] * 5, ids=tuple(reversed(IDS)))]
        with pytest.raises(AlignmentError, match="different sample"):
            combine(sets)

    def test_ids_and_labels_must_match(self):
        with pytest.raises(AlignmentError):
            pset("a", [B, M])

    def test_duplicate_model_names_in_vote_matrix(self):
        with pytest.raises(AlignmentError, match="distinct"):
            vote_matrix([pset("a", [B] * 5), pset("a", [M] * 5)])
