"""Explained variance and intraclass correlation of random-intercept models."""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoefficientOfDetermination:
    """Marginal and conditional R2 of a linear mixed model."""
    marginal: float
    conditional: float

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({'Marginal_R2': [self.marginal], 'Conditional_R2': [self.conditional]},
                            index=[""])


def icc(random_intercept_variance: float, residual_variance: float) -> float:
    """Share of the total variance attributable to the random intercept."""
    u = float(random_intercept_variance)
    e = float(residual_variance)
    return u / (u + e)


def r_squared_mixed(fixed_predictions: Sequence[float],
                    random_intercept_variance: float,
                    residual_variance: float) -> CoefficientOfDetermination:
    """Marginal and conditional R2 (Nakagawa & Schielzeth, 2013).

    Parameters
    ----------
    fixed_predictions : array-like
        Fitted values of the fixed part (X beta) for the sampled units
    random_intercept_variance : float
        Variance of the random intercept
    residual_variance : float
        Unit-level error variance

    Returns
    -------
    CoefficientOfDetermination
        ``var_f / total`` and ``(var_f + var_u) / total`` with
        ``total = var_f + var_u + var_e``
    """
    var_f = float(np.var(np.asarray(fixed_predictions, dtype=float), ddof=1))
    var_u = float(random_intercept_variance)
    var_e = float(residual_variance)
    total = var_f + var_u + var_e

    logger.debug("R2 decomposition: var_f=%.4g, var_u=%.4g, var_e=%.4g", var_f, var_u, var_e)
    return CoefficientOfDetermination(marginal=var_f / total, conditional=(var_f + var_u) / total)
