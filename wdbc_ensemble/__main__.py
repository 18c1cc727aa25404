"""CLI entry point: python -m wdbc_ensemble"""

import argparse
import logging
import sys

from wdbc_ensemble import config
from wdbc_ensemble.data.loader import DATASET_REGISTRY
from wdbc_ensemble.errors import WdbcError
from wdbc_ensemble.models.bank import MODEL_CONFIGS
from wdbc_ensemble.pipeline import EnsemblePipeline
from wdbc_ensemble.utils import set_verbosity


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wdbc_ensemble",
        description=(
            "WDBC ensemble pipeline - trains a bank of classifiers on breast "
            "tumor measurements and combines them by majority vote."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m wdbc_ensemble\n"
            "  python -m wdbc_ensemble --data-file wdbc.data --seed 7\n"
            "  python -m wdbc_ensemble --models glm lda knn rf --on-model-failure drop\n"
            "  python -m wdbc_ensemble --scaling-scope full --output-dir ./results\n"
        ),
    )

    parser.add_argument(
        "--dataset",
        type=str,
        default="wdbc",
        choices=list(DATASET_REGISTRY.keys()),
        help="Registered dataset to analyze (default: wdbc)",
    )
    parser.add_argument(
        "--data-file",
        type=str,
        default=None,
        help="Headerless WDBC file (id, diagnosis, 30 features); overrides --dataset",
    )
    parser.add_argument(
        "--models",
        type=str,
        nargs="+",
        default=None,
        choices=list(MODEL_CONFIGS.keys()),
        help="Models to train (default: all available)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.DEFAULT_SEED,
        help=f"Seed for the split and stochastic models (default: {config.DEFAULT_SEED})",
    )
    parser.add_argument(
        "--validation-size",
        type=float,
        default=config.DEFAULT_VALIDATION_FRACTION,
        help="Fraction of all samples held out for validation (default: 0.2)",
    )
    parser.add_argument(
        "--test-size",
        type=float,
        default=config.DEFAULT_TEST_FRACTION_OF_REMAINDER,
        help="Fraction of the remainder held out for testing (default: 0.2)",
    )
    parser.add_argument(
        "--cv-folds",
        type=int,
        default=config.DEFAULT_CV_FOLDS,
        help="Cross-validation folds for hyperparameter search (default: 5)",
    )
    parser.add_argument(
        "--scaling-scope",
        type=str,
        default="training",
        choices=list(config.SCALING_SCOPES),
        help="Compute scaling statistics on the training subset or the full dataset",
    )
    parser.add_argument(
        "--on-model-failure",
        type=str,
        default="raise",
        choices=list(config.FAILURE_POLICIES),
        help="Abort the run or drop a model that fails to train (default: raise)",
    )
    parser.add_argument(
        "--tie-policy",
        type=str,
        default="negative",
        choices=list(config.TIE_POLICIES),
        help="Label for an exact half-and-half vote: negative = malignant (default)",
    )
    parser.add_argument(
        "--n-jobs",
        type=int,
        default=config.DEFAULT_N_JOBS,
        help="Parallel jobs for scikit-learn estimators (default: 1)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=config.DEFAULT_OUTPUT_DIR,
        help=f"Directory for output files (default: {config.DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    parser.add_argument(
        "--list-models",
        action="store_true",
        help="List all available models and exit",
    )
    parser.add_argument(
        "--list-datasets",
        action="store_true",
        help="List all available datasets and exit",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.list_models:
        print("Available models:")
        for name, spec in MODEL_CONFIGS.items():
            print(f"  {name:<12} {spec.description}")
        return 0

    if args.list_datasets:
        print("Available datasets:")
        for name, info in DATASET_REGISTRY.items():
            print(f"  {name:<12} {info['description']}")
        return 0

    if args.quiet:
        set_verbosity(logging.WARNING)

    try:
        run_config = config.PipelineConfig(
            dataset=args.dataset,
            data_file=args.data_file,
            models=tuple(args.models) if args.models else None,
            seed=args.seed,
            validation_fraction=args.validation_size,
            test_fraction=args.test_size,
            cv_folds=args.cv_folds,
            scaling_scope=args.scaling_scope,
            on_model_failure=args.on_model_failure,
            tie_policy=args.tie_policy,
            n_jobs=args.n_jobs,
            output_dir=args.output_dir,
        )
        EnsemblePipeline(run_config).run()
    except Exception as e:
        kind = "" if isinstance(e, WdbcError) else f"{type(e).__name__}: "
        print(f"\nPipeline failed: {kind}{e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
