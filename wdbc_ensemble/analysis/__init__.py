from wdbc_ensemble.analysis.explorer import DataExplorer

__all__ = ["DataExplorer"]
