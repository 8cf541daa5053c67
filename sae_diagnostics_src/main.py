# sae_diagnostics_src/main.py

"""
Diagnostics for Fay-Herriot small-area estimates exported as CSV tables.

Purpose
-------
- Load an FH result (point estimates, MSEs, gamma weights or random effects)
- Check the tables for consistency
- Compare the FH estimates with the direct estimates (Brown test and
  correlation of the synthetic part with the direct estimator)
- Optionally print the model summary and write diagnostic plots

Configuration-Driven Workflow
-----------------------------
Reporting and test settings are read from YAML files in the config/
directory. CLI arguments override configuration values where applicable.
"""

import argparse
import logging
import sys
import warnings
from pathlib import Path
from typing import List, Optional

from evaluation import compare, summarize
from validation import ensure_valid_result, ResultValidationError

from .config_utils import initialize_config, get_config_value
from .file_utils import load_fh_result, resolve_path
from .parsing_utils import validate_log_level, parse_transformation
from .plotting_utils import save_diagnostic_plots
from .report_utils import format_comparison, format_summary

logger = logging.getLogger(__name__)


def setup_cli_parser() -> argparse.ArgumentParser:
    """
    Set up the command-line argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="Compare Fay-Herriot small-area estimates with the direct estimates."
    )

    # Input tables
    parser.add_argument(
        "--indicators", type=str, required=True,
        help="CSV with columns Domain, Direct, FH, Out."
    )
    parser.add_argument(
        "--mse", type=str, default=None,
        help="CSV with MSE estimates in the same layout as --indicators. Without it the Brown test is skipped."
    )
    parser.add_argument(
        "--gamma", type=str, default=None,
        help="CSV with columns Domain, Gamma (shrinkage factors of all domains)."
    )
    parser.add_argument(
        "--random-effects", dest="random_effects", type=str, default=None,
        help="CSV with column random_effect (and optionally std_real_residual) for the in-sample domains."
    )

    # Model metadata
    parser.add_argument(
        "--method", type=str, default="reml",
        help="Variance estimation method of the fitted model."
    )
    parser.add_argument(
        "--mse-method", dest="mse_method", type=str, default=None,
        help="MSE estimation method of the fitted model."
    )
    parser.add_argument(
        "--transformation", type=str, default="no",
        help="Transformation of the target variable (no, log, arcsin)."
    )
    parser.add_argument(
        "--backtransformation", type=str, default=None,
        help="Back-transformation used (e.g. naive, bc, sm)."
    )

    # Output and behaviour
    parser.add_argument(
        "--summary", action="store_true", default=False,
        help="Also print the model summary (requires --random-effects)."
    )
    parser.add_argument(
        "--stable-upper-tail", dest="stable_upper_tail", action="store_true", default=None,
        help="Evaluate the Brown p-value with the chi-square survival function."
    )
    parser.add_argument(
        "--figures-dir", dest="figures_dir", type=str, default=None,
        help="If provided, write diagnostic plots to this directory."
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Additional YAML configuration file."
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity level (defaults to logging.level from the configuration)."
    )

    return parser


def setup_logging(log_level: str) -> None:
    """
    Configure the root logger for a diagnostics run.

    Notices from ``compare`` and ``summarize`` are mirrored to the log, so
    INFO shows the missing-MSE and in-sample messages. Unless the level is
    DEBUG, statsmodels convergence warnings, FutureWarnings and the
    small-sample RuntimeWarnings of scipy.stats are silenced.

    Parameters
    ----------
    log_level : str
        Level name, case-insensitive
    """
    level = validate_log_level(log_level)
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    if level == "DEBUG":
        warnings.simplefilter("default")
        return

    from statsmodels.tools.sm_exceptions import ConvergenceWarning
    for category, module in ((ConvergenceWarning, ""), (FutureWarning, ""), (RuntimeWarning, "scipy")):
        warnings.filterwarnings("ignore", category=category, module=module)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the diagnostics command line tool.

    Returns
    -------
    int
        Process exit code (0 on success, 1 on invalid input)
    """
    parser = setup_cli_parser()
    args = parser.parse_args(argv)

    base_dir = Path.cwd()
    config_file = resolve_path(args.config, base_dir) if args.config else None
    initialize_config(config_file)

    setup_logging(get_config_value('logging.level', "INFO", args, "log_level"))

    try:
        transformation = parse_transformation(args.transformation, args.backtransformation)
        result = load_fh_result(
            resolve_path(args.indicators, base_dir),
            mse_csv=resolve_path(args.mse, base_dir) if args.mse else None,
            gamma_csv=resolve_path(args.gamma, base_dir) if args.gamma else None,
            random_effects_csv=resolve_path(args.random_effects, base_dir) if args.random_effects else None,
            method=args.method,
            mse_method=args.mse_method,
            transformation=transformation,
            backtransformation=args.backtransformation
        )
        ensure_valid_result(result)
    except (FileNotFoundError, ValueError, ResultValidationError) as e:
        logger.error("Cannot run diagnostics: %s", e)
        return 1

    stable_upper_tail = bool(get_config_value('brown_test.stable_upper_tail', False, args, "stable_upper_tail"))
    comparison = compare(result, stable_upper_tail=stable_upper_tail)
    print(format_comparison(comparison), end="")

    if args.summary:
        if args.random_effects is None:
            logger.warning("--summary requires --random-effects; skipping the model summary")
        else:
            print()
            print(format_summary(summarize(result)), end="")

    if args.figures_dir and get_config_value('plots.create_plots', True):
        figures_dir = resolve_path(args.figures_dir, base_dir)
        save_diagnostic_plots(result, figures_dir, dpi=int(get_config_value('plots.dpi', 300)))

    return 0


if __name__ == "__main__":
    sys.exit(main())
