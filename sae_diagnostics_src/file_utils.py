# sae_diagnostics_src/file_utils.py

import pandas as pd
import numpy as np
from pathlib import Path
from typing import List, Optional
import logging

from results import (
    DIRECT_COL, DOMAIN_COL, OUT_COL, GAMMA_COL,
    ModelVariant, FittedModelResult, FHModelInternals, SampleFramework,
    EstimationMethod, FittingCall, TransformationInfo
)

logger = logging.getLogger(__name__)

RANDOM_EFFECT_COL = "random_effect"
STD_RESIDUAL_COL = "std_real_residual"


def ensure_dir(path: Path) -> None:
    """
    Create directory if it doesn't exist, including all parent directories.

    Parameters
    ----------
    path : Path
        Directory path to create
    """
    path.mkdir(parents=True, exist_ok=True)


def resolve_path(path_str: str, base_dir: Path) -> Path:
    """
    Resolve a path string relative to a base directory if not absolute.

    Examples
    --------
    >>> resolve_path("data/fh_ind.csv", Path("/project"))
    Path("/project/data/fh_ind.csv")
    """
    path = Path(path_str)
    return path if path.is_absolute() else (base_dir / path)


def read_table_csv(csv_path: Path, required_columns: List[str]) -> pd.DataFrame:
    """
    Read a CSV table and check that the required columns are present.

    Parameters
    ----------
    csv_path : Path
        Path to CSV file
    required_columns : list of str
        Columns that must be present

    Returns
    -------
    pd.DataFrame
        Loaded table

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the file is empty, cannot be parsed or lacks required columns
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    try:
        df = pd.read_csv(csv_path)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"CSV file contains no data: {csv_path}") from e
    except pd.errors.ParserError as e:
        raise ValueError(f"Failed to parse CSV file {csv_path}: {e}") from e

    missing = [col for col in required_columns if col not in df.columns]
    if missing:
        raise ValueError(f"CSV file {csv_path} is missing columns: {missing}")

    logger.debug("Read %d rows from %s", len(df), csv_path)
    return df


def load_fh_result(indicators_csv: Path,
                   mse_csv: Optional[Path] = None,
                   gamma_csv: Optional[Path] = None,
                   random_effects_csv: Optional[Path] = None,
                   method: str = "reml",
                   mse_method: Optional[str] = None,
                   transformation: Optional[str] = None,
                   backtransformation: Optional[str] = None) -> FittedModelResult:
    """
    Assemble a Fay-Herriot result from exported CSV tables.

    Expected layouts
    ----------------
    - indicators / MSE: ``Domain, Direct, FH, Out``
    - gamma: ``Domain, Gamma`` (one row per domain, same order as the indicators)
    - random effects: ``random_effect`` and optionally ``std_real_residual``
      (one row per in-sample domain)

    The framework domain counts are derived from the ``Out`` column.
    """
    estimate_cols = [DOMAIN_COL, DIRECT_COL, "FH", OUT_COL]
    indicators = read_table_csv(indicators_csv, estimate_cols)
    mse = read_table_csv(mse_csv, estimate_cols) if mse_csv is not None else None
    gamma = read_table_csv(gamma_csv, [DOMAIN_COL, GAMMA_COL]) if gamma_csv is not None else None

    random_effects = np.array([], dtype=float)
    std_residuals = np.array([], dtype=float)
    if random_effects_csv is not None:
        re_table = read_table_csv(random_effects_csv, [RANDOM_EFFECT_COL])
        random_effects = re_table[RANDOM_EFFECT_COL].to_numpy(dtype=float)
        if STD_RESIDUAL_COL in re_table.columns:
            std_residuals = re_table[STD_RESIDUAL_COL].to_numpy(dtype=float)

    if gamma is None and random_effects_csv is None:
        raise ValueError("Either a gamma table or a random effects table is required")

    n_in = int((indicators[OUT_COL] == 0).sum())
    framework = SampleFramework(
        n_domains_sampled=n_in,
        n_domains_unobserved=int(len(indicators) - n_in)
    )

    model = FHModelInternals(
        random_effects=random_effects,
        std_real_residuals=std_residuals,
        gamma=gamma
    )

    logger.info("Loaded FH result: %d domains (%d in-sample), MSE %s",
                len(indicators), n_in, "available" if mse is not None else "not available")

    return FittedModelResult(
        variant=ModelVariant.FH,
        indicators=indicators,
        framework=framework,
        mse=mse,
        model=model,
        transformation=TransformationInfo(transformation=transformation, backtransformation=backtransformation),
        method=EstimationMethod(method=method, mse_method=mse_method),
        call=FittingCall("fh", {'indicators': str(indicators_csv)})
    )
