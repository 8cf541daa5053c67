"""Comparison of Fay-Herriot estimates with the direct estimates.

Two measures assess how well the model-based estimates agree with the
direct estimates of the in-sample domains:

- the Brown goodness-of-fit test (Brown et al., 2001)
- the correlation between the synthetic part of the FH estimator and the
  direct estimator (Chandra et al., 2015)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from config import get_config
from diagnostics import (
    BrownTestOutcome,
    brown_test,
    extract_synthetic_part,
    synthetic_direct_correlation
)
from results import FittedModelResult, ModelVariant
from validation import Notice, PreconditionError, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonResult:
    """Brown test outcome and synthetic/direct correlation of an FH model."""
    brown: Optional[BrownTestOutcome]
    synthetic_correlation: Optional[float]
    notices: Tuple[Notice, ...] = field(default_factory=tuple)


def _use_stable_upper_tail(config_manager=None) -> bool:
    manager = config_manager if config_manager is not None else get_config()
    return bool(manager.get('brown_test.stable_upper_tail', False))


def compare(model: FittedModelResult,
            stable_upper_tail: Optional[bool] = None,
            config_manager=None) -> ComparisonResult:
    """Assess FH estimates against the direct estimates.

    Parameters
    ----------
    model : FittedModelResult
        Fitted Fay-Herriot result
    stable_upper_tail : bool, optional
        Evaluate the Brown p-value with the survival function; defaults to
        ``brown_test.stable_upper_tail`` from the configuration
    config_manager : ConfigurationManager, optional
        Configuration source (defaults to the global configuration)

    Returns
    -------
    ComparisonResult
        Brown test (None without MSE estimates), correlation and notices

    Raises
    ------
    TypeError
        If ``model`` is not a Fay-Herriot result
    """
    if not isinstance(model, FittedModelResult) or model.variant is not ModelVariant.FH:
        raise TypeError("Object needs to be of class fh.")

    if stable_upper_tail is None:
        stable_upper_tail = _use_stable_upper_tail(config_manager)

    logger.info("Comparing FH estimates with direct estimates")
    notices: List[Notice] = []

    direct = model.in_sample_direct()
    estimates = model.in_sample_estimates()

    mse = model.in_sample_mse() if model.has_mse else {'direct': None, 'model': None}
    try:
        brown = brown_test(
            direct, estimates, mse['direct'], mse['model'],
            n_domains=model.framework.n_domains_sampled,
            stable_upper_tail=stable_upper_tail
        )
    except PreconditionError:
        brown = None
        notices.append(Notice(
            severity=Severity.INFO,
            message="The fh object does not contain MSE estimates. The Brown test statistic cannot be computed.",
            component="brown_test"
        ).log())

    gamma = model.in_sample_gamma()
    if gamma is not None:
        synthetic = extract_synthetic_part(estimates, direct, gamma=gamma)
    else:
        synthetic = extract_synthetic_part(estimates, direct, random_effects=model.model.random_effects)

    correlation = synthetic_direct_correlation(synthetic, direct)

    if model.has_out_of_sample:
        notices.append(Notice(
            severity=Severity.INFO,
            message="Please note that the computation of both test statistics is only based on in-sample domains.",
            component="compare",
            details={'n_domains_unobserved': model.framework.n_domains_unobserved}
        ).log())

    return ComparisonResult(brown=brown, synthetic_correlation=correlation, notices=tuple(notices))
