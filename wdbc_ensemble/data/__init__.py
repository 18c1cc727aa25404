from wdbc_ensemble.data.loader import DATASET_REGISTRY, Dataset, DatasetLoader, validate_frame
from wdbc_ensemble.data.preprocessor import FeatureScaler, PreparedData, Preprocessor
from wdbc_ensemble.data.splitter import Split, SplitFractions, split

__all__ = [
    "DATASET_REGISTRY",
    "Dataset",
    "DatasetLoader",
    "FeatureScaler",
    "PreparedData",
    "Preprocessor",
    "Split",
    "SplitFractions",
    "split",
    "validate_frame",
]
