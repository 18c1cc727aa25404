"""
WDBC ensemble pipeline.

Orchestrates the full run: data loading -> exploration -> split ->
scaling -> model training -> ensemble evaluation -> reporting.
"""

from __future__ import annotations

import os
import traceback
from typing import Callable

from wdbc_ensemble import __version__
from wdbc_ensemble.analysis import DataExplorer
from wdbc_ensemble.config import PipelineConfig
from wdbc_ensemble.data import DatasetLoader, Preprocessor, SplitFractions, split
from wdbc_ensemble.evaluation import ModelEvaluator, Reporter
from wdbc_ensemble.models import ModelBank, TiePolicy
from wdbc_ensemble.utils import get_logger

log = get_logger("wdbc_ensemble")

DISCLAIMER = (
    "DISCLAIMER: This pipeline is an ML research tool for analyzing a publicly "
    "available cancer dataset. It does NOT provide medical diagnoses, "
    "treatment recommendations, or replace professional medical advice."
)

STAGES = [
    "Data Loading",
    "Exploratory Analysis",
    "Split",
    "Preprocessing",
    "Model Training",
    "Evaluation",
    "Report Generation",
]


class EnsemblePipeline:
    """
    Runs the complete WDBC analysis for one PipelineConfig.

    Stages:
        1. Data Loading    - registry dataset or local WDBC file
        2. Exploration     - summary statistics, correlations, PCA
        3. Split           - stratified training / testing / validation
        4. Preprocessing   - center and scale features
        5. Training        - fit every bank member
        6. Evaluation      - results table, ensemble, confusion reports
        7. Reporting       - print summary, write JSON and CSV
    """

    def __init__(self, run_config: PipelineConfig | None = None,
                 on_progress: Callable[[int, int, str], None] | None = None):
        self.config = run_config or PipelineConfig()
        self.on_progress = on_progress

        # Pipeline state
        self.dataset = None
        self.eda_report = None
        self.split = None
        self.prepared = None
        self.training_results = None
        self.evaluation_results = None
        self.report = None

    def run(self) -> dict:
        """
        Execute every stage in order.

        Returns the final report dict.
        """
        log.info("=" * 60)
        log.info("WDBC ENSEMBLE PIPELINE v%s", __version__)
        log.info("=" * 60)
        log.info(DISCLAIMER)

        stage_fns = [
            self._stage_load,
            self._stage_eda,
            self._stage_split,
            self._stage_preprocess,
            self._stage_train,
            self._stage_evaluate,
            self._stage_report,
        ]
        total = len(stage_fns)

        for i, (stage_name, stage_fn) in enumerate(zip(STAGES, stage_fns), start=1):
            log.info("-" * 60)
            log.info("STAGE %d/%d: %s", i, total, stage_name)
            log.info("-" * 60)
            if self.on_progress is not None:
                self.on_progress(i, total, stage_name)
            try:
                stage_fn()
            except Exception:
                log.error("Stage '%s' failed:\n%s", stage_name, traceback.format_exc())
                raise

        return self.report

    def _stage_load(self):
        loader = DatasetLoader()
        if self.config.data_file:
            self.dataset = loader.load_csv(self.config.data_file)
        else:
            self.dataset = loader.load(self.config.dataset)

    def _stage_eda(self):
        self.eda_report = DataExplorer().run(self.dataset)

    def _stage_split(self):
        fractions = SplitFractions.nested(
            self.config.validation_fraction, self.config.test_fraction
        )
        self.split = split(self.dataset, fractions, seed=self.config.seed)

    def _stage_preprocess(self):
        preprocessor = Preprocessor(scaling_scope=self.config.scaling_scope)
        self.prepared = preprocessor.run(self.dataset, self.split)

    def _stage_train(self):
        bank = ModelBank(
            models=list(self.config.models) if self.config.models else None,
            seed=self.config.seed,
            cv_folds=self.config.cv_folds,
            n_jobs=self.config.n_jobs,
            on_failure=self.config.on_model_failure,
        )
        self.training_results = bank.fit_all(self.prepared.X_train, self.prepared.y_train)

    def _stage_evaluate(self):
        evaluator = ModelEvaluator(tie_policy=TiePolicy(self.config.tie_policy))
        self.evaluation_results = evaluator.run(
            self.training_results["trained_models"], self.prepared
        )

    def _stage_report(self):
        reporter = Reporter()
        self.report = reporter.generate(
            dataset_metadata=self.dataset.metadata(),
            eda_report=self.eda_report,
            preprocessing_info=self.prepared.info,
            training_results=self.training_results,
            evaluation_results=self.evaluation_results,
            run_config=self.config.to_dict(),
        )

        summary = reporter.print_summary(self.report)
        print("\n" + summary)

        os.makedirs(self.config.output_dir, exist_ok=True)
        json_path = os.path.join(self.config.output_dir, "report.json")
        reporter.save_json(self.report, json_path)
        reporter.save_results_csv(
            self.report, os.path.join(self.config.output_dir, "results.csv")
        )
        log.info("Full JSON report saved to: %s", json_path)
