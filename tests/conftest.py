import numpy as np
import pandas as pd
import pytest

from wdbc_ensemble import config
from wdbc_ensemble.data import Preprocessor, SplitFractions, split, validate_frame


def make_frame(n_benign: int = 60, n_malignant: int = 40, seed: int = 0,
               shift: float = 2.0) -> pd.DataFrame:
    """Raw WDBC-shaped table with malignant samples shifted on every feature."""
    rng = np.random.default_rng(seed)
    n = n_benign + n_malignant
    labels = np.array([config.BENIGN] * n_benign + [config.MALIGNANT] * n_malignant)
    rng.shuffle(labels)

    features = rng.normal(loc=10.0, scale=1.0, size=(n, config.N_FEATURES))
    features[labels == config.MALIGNANT] += shift

    df = pd.DataFrame(features, columns=config.FEATURE_COLUMNS)
    df.insert(0, config.LABEL_COLUMN, labels)
    df.insert(0, config.ID_COLUMN, np.arange(1000, 1000 + n))
    return df


@pytest.fixture
def frame():
    return make_frame()


@pytest.fixture
def dataset(frame):
    return validate_frame(frame, name="synthetic")


@pytest.fixture
def data_split(dataset):
    return split(dataset, SplitFractions.nested(0.2, 0.2), seed=1)


@pytest.fixture
def prepared(dataset, data_split):
    return Preprocessor().run(dataset, data_split)
