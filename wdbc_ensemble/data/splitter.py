"""Stratified training / testing / validation split."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from wdbc_ensemble import config
from wdbc_ensemble.data.loader import Dataset
from wdbc_ensemble.errors import ConfigError
from wdbc_ensemble.utils import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SplitFractions:
    """Shares of the whole dataset held out for validation and testing.

    Training receives whatever is left.
    """

    validation: float = 0.2
    test: float = 0.16

    @classmethod
    def nested(cls, validation: float, test_of_remainder: float) -> "SplitFractions":
        """Hold out ``validation``, then ``test_of_remainder`` of what is left."""
        return cls(validation=validation, test=test_of_remainder * (1.0 - validation))

    @property
    def training(self) -> float:
        return 1.0 - self.validation - self.test

    def validate(self) -> None:
        for name, value in (("validation", self.validation), ("test", self.test)):
            if not math.isfinite(value) or value < 0:
                raise ConfigError(f"{name} fraction must be non-negative, got {value!r}")
        if self.validation + self.test > 1.0:
            raise ConfigError(
                f"Split fractions sum to {self.validation + self.test:.3f}, must be <= 1"
            )


@dataclass(frozen=True)
class Split:
    training: Dataset
    testing: Dataset
    validation: Dataset
    seed: int

    def sizes(self) -> dict[str, int]:
        return {
            "training": len(self.training),
            "testing": len(self.testing),
            "validation": len(self.validation),
        }

    def class_counts(self) -> dict[str, dict[str, int]]:
        return {
            "training": self.training.class_counts(),
            "testing": self.testing.class_counts(),
            "validation": self.validation.class_counts(),
        }


def _holdout_count(fraction: float, class_size: int) -> int:
    if fraction <= 0:
        return 0
    return max(1, int(round(fraction * class_size)))


def split(dataset: Dataset, fractions: SplitFractions | None = None,
          seed: int = config.DEFAULT_SEED) -> Split:
    """Partition ``dataset`` into stratified training/testing/validation subsets.

    Within each class the members are shuffled by a generator seeded with
    ``seed``; validation takes the first share, testing the next, training
    the rest. A held-out subset with a non-zero fraction gets at least one
    member of every class, and training always does. Subsets keep the
    source order of their samples.
    """
    fractions = fractions or SplitFractions()
    fractions.validate()

    if len(dataset) == 0:
        raise ConfigError("Cannot split an empty dataset")

    counts = dataset.class_counts()
    absent = [label for label, n in counts.items() if n == 0]
    if absent:
        raise ConfigError(f"Stratified split needs both classes; missing {absent}")

    n_subsets = 1 + (fractions.validation > 0) + (fractions.test > 0)
    too_small = {label: n for label, n in counts.items() if n < n_subsets}
    if too_small:
        raise ConfigError(
            f"Each class needs at least {n_subsets} samples to fill "
            f"{n_subsets} stratified subsets; got {too_small}"
        )

    rng = np.random.default_rng(seed)
    labels = dataset.labels.to_numpy()
    val_pos, test_pos, train_pos = [], [], []

    for label in config.LABELS:
        members = rng.permutation(np.flatnonzero(labels == label))
        n = len(members)
        n_val = _holdout_count(fractions.validation, n)
        n_test = _holdout_count(fractions.test, n)
        if n_val + n_test >= n:
            raise ConfigError(
                f"Class '{label}' has {n} samples; holding out {n_val} for "
                f"validation and {n_test} for testing leaves none for training"
            )
        val_pos.extend(members[:n_val])
        test_pos.extend(members[n_val:n_val + n_test])
        train_pos.extend(members[n_val + n_test:])

    ids = dataset.ids

    def _subset(positions, name):
        return dataset.subset(ids[np.sort(np.asarray(positions, dtype=int))],
                              name=f"{dataset.name}:{name}")

    result = Split(
        training=_subset(train_pos, "training"),
        testing=_subset(test_pos, "testing"),
        validation=_subset(val_pos, "validation"),
        seed=seed,
    )
    sizes = result.sizes()
    log.info(
        "Split (seed=%d): %d training / %d testing / %d validation",
        seed, sizes["training"], sizes["testing"], sizes["validation"],
    )
    return result
