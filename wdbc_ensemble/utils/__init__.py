from wdbc_ensemble.utils.logger import get_logger, set_verbosity

__all__ = ["get_logger", "set_verbosity"]
