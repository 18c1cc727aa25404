from wdbc_ensemble.evaluation.evaluator import ConfusionMatrix, ModelEvaluator, evaluate
from wdbc_ensemble.evaluation.reporter import Reporter

__all__ = ["ConfusionMatrix", "ModelEvaluator", "Reporter", "evaluate"]
