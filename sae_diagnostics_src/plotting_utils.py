# sae_diagnostics_src/plotting_utils.py

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from pathlib import Path
from scipy import stats
from typing import Dict, Optional
import logging

from results import FittedModelResult, FHModelInternals, EBPModelFit

from .file_utils import ensure_dir

logger = logging.getLogger(__name__)


def plot_qq(values: np.ndarray, title: str, out_path: Path, dpi: int = 300) -> None:
    """
    Render and save a normal Q-Q plot for a residual-like vector.

    Parameters
    ----------
    values : np.ndarray
        Vector to plot; NaN entries are dropped
    title : str
        Plot title
    out_path : Path
        File path to save the PNG (parents are created if missing)
    dpi : int, default=300
        Output resolution
    """
    ensure_dir(out_path.parent)
    x = np.asarray(values, dtype=float)
    x = x[~np.isnan(x)]

    fig, ax = plt.subplots(figsize=(6, 6))
    stats.probplot(x, dist="norm", plot=ax)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(out_path, dpi=dpi)
    plt.close(fig)


def plot_direct_vs_model(result: FittedModelResult, out_path: Path, dpi: int = 300) -> None:
    """
    Scatter the in-sample model-based estimates against the direct estimates.

    Points on the dashed identity line indicate agreement between both estimators.
    """
    ensure_dir(out_path.parent)
    direct = result.in_sample_direct()
    estimates = result.in_sample_estimates()

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.scatter(direct, estimates, alpha=0.7, color='steelblue')
    lo = float(np.nanmin(np.concatenate([direct, estimates])))
    hi = float(np.nanmax(np.concatenate([direct, estimates])))
    ax.plot([lo, hi], [lo, hi], 'r--', linewidth=1)
    ax.set_xlabel("Direct")
    ax.set_ylabel(result.model_column)
    ax.set_title(f"{result.model_column} vs. direct estimates (in-sample domains)")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(out_path, dpi=dpi)
    plt.close(fig)


def save_diagnostic_plots(result: FittedModelResult,
                          out_dir: Path,
                          fname_prefix: Optional[str] = None,
                          dpi: int = 300) -> Dict[str, Path]:
    """
    Save Q-Q plots of the model errors and random effects plus the direct/model scatter.

    Parameters
    ----------
    result : FittedModelResult
        Fitted FH or EBP result
    out_dir : Path
        Output directory
    fname_prefix : str, optional
        Filename prefix (defaults to the model column, e.g. 'FH')
    dpi : int, default=300
        Output resolution

    Returns
    -------
    dict
        Mapping of plot names to file paths
    """
    prefix = fname_prefix or result.model_column
    paths: Dict[str, Path] = {}

    if isinstance(result.model, FHModelInternals):
        vectors = {
            'std_residuals_qq': (result.model.std_real_residuals, "Standardized residuals"),
            'random_effects_qq': (result.model.random_effects, "Random effects"),
        }
    elif isinstance(result.model, EBPModelFit):
        vectors = {
            'pearson_residuals_qq': (result.model.pearson_residuals, "Pearson residuals"),
            'random_effects_qq': (result.model.random_intercepts, "Random effects"),
        }
    else:
        vectors = {}

    for name, (values, title) in vectors.items():
        if len(values) < 2:
            logger.debug("Skipping %s plot: fewer than two values", name)
            continue
        path = out_dir / f"{prefix}_{name}.png"
        plot_qq(values, f"{prefix} {title} Q-Q Plot (Normal)", path, dpi=dpi)
        paths[name] = path

    if result.indicators is not None and result.model_column in result.indicators.columns:
        path = out_dir / f"{prefix}_direct_vs_model.png"
        plot_direct_vs_model(result, path, dpi=dpi)
        paths['direct_vs_model'] = path

    logger.info("Created %d diagnostic plots in %s", len(paths), out_dir)
    return paths
