"""Error kinds raised by the pipeline.

All of them subclass ValueError as well, so code that already guards
scikit-learn or pandas calls with ``except ValueError`` keeps working.
"""


class WdbcError(Exception):
    """Base class for every pipeline error."""


class DataError(WdbcError, ValueError):
    """Malformed, missing or non-finite input values."""


class ConfigError(WdbcError, ValueError):
    """Invalid split fractions, degenerate class counts or bad settings."""


class TrainingError(WdbcError, ValueError):
    """A model could not be fit, e.g. on a single-class training set."""


class AlignmentError(WdbcError, ValueError):
    """Prediction and label sequences that do not line up."""
