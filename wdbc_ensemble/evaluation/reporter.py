"""Compiles pipeline outputs into a report: text summary, JSON and CSV."""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pandas as pd

from wdbc_ensemble import __version__
from wdbc_ensemble.evaluation.evaluator import ConfusionMatrix
from wdbc_ensemble.utils import get_logger

log = get_logger(__name__)


def _fmt(value) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "n/a"
    return f"{value:.4f}"


class Reporter:
    def generate(self, dataset_metadata: dict, eda_report: dict,
                 preprocessing_info: dict, training_results: dict,
                 evaluation_results: dict, run_config: dict | None = None) -> dict:
        trained = training_results["trained_models"]
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "config": run_config or {},
            "dataset": dataset_metadata,
            "exploration": eda_report,
            "preprocessing": preprocessing_info,
            "training": {
                "models": [m.summary() for m in trained.values()],
                "dropped": training_results.get("failures", {}),
            },
            "evaluation": {
                "results_table": evaluation_results["results_table"].to_dict(orient="records"),
                "best_model_name": evaluation_results["best_model_name"],
                "tie_policy": evaluation_results["tie_policy"],
                "testing_confusion": {
                    name: cm.to_dict()
                    for name, cm in evaluation_results["testing_confusion"].items()
                },
                "reports": {
                    subset: {name: cm.to_dict() for name, cm in by_model.items()}
                    for subset, by_model in evaluation_results["reports"].items()
                },
                "top_features": evaluation_results.get("top_features", []),
            },
        }

    def print_summary(self, report: dict) -> str:
        """Plain-text summary of the results table and confusion reports."""
        ev = report["evaluation"]
        lines = [
            "=" * 60,
            "WDBC ENSEMBLE REPORT",
            "=" * 60,
            f"Dataset: {report['dataset']['name']} "
            f"({report['dataset']['n_samples']} samples)",
            f"Scaling scope: {report['preprocessing'].get('scaling_scope')}",
            f"Tie policy: {ev['tie_policy']}",
            "",
            "Testing accuracy by model:",
        ]
        for row in ev["results_table"]:
            lines.append(f"  {row['model']:<12} {_fmt(row['accuracy'])}")

        dropped = report["training"]["dropped"]
        if dropped:
            lines.append("")
            lines.append("Dropped models: " + ", ".join(sorted(dropped)))

        for subset, by_model in ev["reports"].items():
            lines.append("")
            lines.append(f"Confusion reports ({subset}):")
            for name, cm in by_model.items():
                lines.append(self.format_confusion(name, cm))

        lines.append("=" * 60)
        return "\n".join(lines)

    @staticmethod
    def format_confusion(name: str, cm: dict | ConfusionMatrix) -> str:
        if isinstance(cm, ConfusionMatrix):
            cm = cm.to_dict()
        return (
            f"  {name:<12} TP={cm['tp']} TN={cm['tn']} FP={cm['fp']} FN={cm['fn']} "
            f"acc={_fmt(cm['accuracy'])} sens={_fmt(cm['sensitivity'])} "
            f"spec={_fmt(cm['specificity'])} bal={_fmt(cm['balanced_accuracy'])}"
        )

    def save_json(self, report: dict, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._make_serializable(report), f, indent=2)

    def save_results_csv(self, report: dict, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(report["evaluation"]["results_table"]).to_csv(path, index=False)
        log.info("Results table saved to: %s", path)

    def _make_serializable(self, obj):
        """Convert numpy / pandas values to JSON-native types; NaN becomes null."""
        if isinstance(obj, dict):
            return {str(k): self._make_serializable(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [self._make_serializable(v) for v in obj]
        if isinstance(obj, pd.DataFrame):
            return self._make_serializable(obj.to_dict(orient="records"))
        if isinstance(obj, pd.Series):
            return self._make_serializable(obj.to_dict())
        if isinstance(obj, np.ndarray):
            return self._make_serializable(obj.tolist())
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, (float, np.floating)):
            value = float(obj)
            return None if math.isnan(value) or math.isinf(value) else value
        return obj
