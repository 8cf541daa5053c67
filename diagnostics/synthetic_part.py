"""Synthetic (regression-only) part of the Fay-Herriot predictor.

For models with shrinkage factors the FH estimate is
``m = gamma * d + (1 - gamma) * xb``, so the synthetic part is recovered as
``xb = (m - gamma * d) / (1 - gamma)``. For models without gamma weights the
random effects are subtracted directly: ``xb = m - u``.

A gamma weight of exactly 1 makes the first formula non-finite; those
values are returned as-is.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)


def extract_synthetic_part(model_estimates: Sequence[float],
                           direct: Sequence[float],
                           gamma: Optional[Sequence[float]] = None,
                           random_effects: Union[Sequence[float], float, None] = None) -> np.ndarray:
    """Back-calculate the synthetic part of in-sample FH estimates.

    Parameters
    ----------
    model_estimates : array-like
        In-sample FH point estimates
    direct : array-like
        In-sample direct estimates
    gamma : array-like, optional
        In-sample shrinkage factors
    random_effects : array-like or float, optional
        Random effects of the in-sample domains (used when gamma is absent)

    Returns
    -------
    np.ndarray
        Synthetic part aligned with the in-sample domains
    """
    if (gamma is None) == (random_effects is None):
        raise ValueError("Exactly one of gamma or random_effects must be provided")

    m = np.asarray(model_estimates, dtype=float)
    d = np.asarray(direct, dtype=float)
    if len(m) != len(d):
        raise ValueError("model_estimates and direct must have equal length")

    if gamma is not None:
        g = np.asarray(gamma, dtype=float)
        if len(g) != len(m):
            raise ValueError("gamma must have one weight per in-sample domain")
        with np.errstate(divide='ignore', invalid='ignore'):
            xb = (m - g * d) / (1 - g)
        n_degenerate = int(np.sum(g == 1))
        if n_degenerate:
            logger.warning("%d domain(s) with gamma == 1; synthetic part is not finite there", n_degenerate)
        return xb

    u = np.asarray(random_effects, dtype=float)
    if u.size != 1 and u.shape != m.shape:
        raise ValueError("random_effects must be a scalar or have one value per in-sample domain")
    return m - u


def synthetic_direct_correlation(synthetic: Sequence[float], direct: Sequence[float]) -> float:
    """Pearson correlation between the synthetic part and the direct estimates.

    Returns NaN when the correlation is undefined (fewer than two domains,
    constant input or non-finite synthetic values).
    """
    xb = np.asarray(synthetic, dtype=float)
    d = np.asarray(direct, dtype=float)
    if len(xb) != len(d):
        raise ValueError("synthetic and direct must have equal length")
    if len(xb) < 2 or not np.all(np.isfinite(xb)):
        return float('nan')

    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.corrcoef(xb, d)[0, 1])
