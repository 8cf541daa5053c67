"""Model-fit summaries for Direct, EBP and Fay-Herriot results.

``summarize`` extracts information about the sample and population data,
the applied transformation, normality diagnostics of the model errors and
explained-variance measures. The returned ``DiagnosticSummary`` always has
the same fields; those that do not apply to a variant are ``None``.

References
----------
Nakagawa, S. and Schielzeth, H. (2013). A general and simple method for
obtaining R2 from generalized linear mixed-effects models. Methods in
Ecology and Evolution, 4(2), 133-142.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from config import get_config
from diagnostics import (
    ShapiroGuard,
    assess_normality,
    normality_table,
    icc,
    r_squared_mixed
)
from results import (
    FittedModelResult,
    ModelVariant,
    EBPModelFit,
    FHModelInternals,
    EstimationMethod,
    FittingCall,
    TransformationInfo,
    TransformationType
)
from validation import Notice

logger = logging.getLogger(__name__)

SIZE_SUMMARY_LABELS = ["Min.", "1st Qu.", "Median", "Mean", "3rd Qu.", "Max."]

BACKTRANSFORMATION_LABELS = {
    "sm": "slud-maiti",
}


@dataclass(frozen=True)
class DiagnosticSummary:
    """Variant-tagged summary of a fitted result."""
    variant: ModelVariant
    n_domains_out_of_sample: Optional[int] = None
    n_domains_in_sample: Optional[int] = None
    n_units_sample: Optional[int] = None
    n_units_population: Optional[int] = None
    domain_sizes: Optional[pd.DataFrame] = None
    sample_size_table: Optional[pd.Series] = None
    transformation: Optional[pd.DataFrame] = None
    normality: Optional[pd.DataFrame] = None
    icc: Optional[float] = None
    coefficient_of_determination: Optional[pd.DataFrame] = None
    model: Optional[FHModelInternals] = None
    method: Optional[EstimationMethod] = None
    call: Optional[FittingCall] = None
    notices: Tuple[Notice, ...] = field(default_factory=tuple)


def sample_size_table(domains: Sequence) -> pd.Series:
    """Number of units per domain, ordered by domain."""
    if domains is None:
        raise ValueError("A domain vector is required to count units per domain")
    counts = pd.Series(np.asarray(domains)).value_counts(sort=False).sort_index()
    counts.index.name = "Domain"
    counts.name = "Freq"
    return counts


def domain_size_summary(domains: Sequence) -> pd.Series:
    """Minimum, quartiles, mean and maximum of the units per domain."""
    sizes = sample_size_table(domains).to_numpy(dtype=float)
    q1, median, q3 = np.quantile(sizes, [0.25, 0.5, 0.75])
    values = [sizes.min(), q1, median, sizes.mean(), q3, sizes.max()]
    return pd.Series(values, index=SIZE_SUMMARY_LABELS, dtype=float)


def _shift_digits(config_manager=None) -> int:
    manager = config_manager if config_manager is not None else get_config()
    return int(manager.get('reporting.shift_parameter_digits', 3))


def ebp_transformation_table(transformation: Optional[TransformationInfo],
                             method: Optional[EstimationMethod] = None,
                             digits: int = 3) -> Optional[pd.DataFrame]:
    """Transformation block of an EBP summary.

    ``no`` yields None, ``log`` reports the shift parameter and ``box.cox``
    additionally the lambda estimation method and the optimal lambda.
    """
    if transformation is None or transformation.transformation is TransformationType.NO:
        return None

    shift = transformation.shift_parameter
    shift = round(shift, digits) if shift is not None else None

    if transformation.transformation is TransformationType.BOX_COX:
        row = {
            'Transformation': transformation.transformation.value,
            'Method': method.method if method is not None else "reml",
            'Optimal_lambda': transformation.optimal_lambda,
            'Shift_parameter': shift,
        }
    elif transformation.transformation is TransformationType.LOG:
        row = {
            'Transformation': transformation.transformation.value,
            'Shift_parameter': shift,
        }
    else:
        raise ValueError(f"Transformation {transformation.transformation.value!r} is not available for EBP models")

    return pd.DataFrame([row], index=[""])


def fh_transformation_table(transformation: Optional[TransformationInfo]) -> Optional[pd.DataFrame]:
    """Transformation block of an FH summary; ``no`` yields None."""
    if transformation is None or transformation.transformation is TransformationType.NO:
        return None

    back = transformation.backtransformation
    back = BACKTRANSFORMATION_LABELS.get(back, back)
    return pd.DataFrame([{
        'Transformation': transformation.transformation.value,
        'Back_transformation': back,
    }], index=[""])


def _summarize_direct(result: FittedModelResult) -> DiagnosticSummary:
    framework = result.framework
    domains = framework.sample_domains
    size_dom = None
    size_tab = None
    if domains is not None:
        size_tab = sample_size_table(domains)
        size_dom = pd.DataFrame([domain_size_summary(domains)], index=["Sample_domains"])

    return DiagnosticSummary(
        variant=ModelVariant.DIRECT,
        n_domains_in_sample=framework.n_domains_sampled,
        n_units_sample=framework.n_units_sampled,
        domain_sizes=size_dom,
        sample_size_table=size_tab,
        call=result.call
    )


def _summarize_ebp(result: FittedModelResult, config_manager=None) -> DiagnosticSummary:
    fit = result.model
    if not isinstance(fit, EBPModelFit):
        raise TypeError("EBP results need an EBPModelFit as model.")

    framework = result.framework
    notices: List[Notice] = []

    size_rows = {}
    if framework.sample_domains is not None:
        size_rows["Sample_domains"] = domain_size_summary(framework.sample_domains)
    if framework.population_domains is not None:
        size_rows["Population_domains"] = domain_size_summary(framework.population_domains)
    size_dom = pd.DataFrame(list(size_rows.values()), index=list(size_rows)) if size_rows else None

    residuals = assess_normality(
        fit.pearson_residuals, "Error", ShapiroGuard.EXCLUSIVE, notices=notices,
        not_applicable_message="Number of observations exceeds 5000 or is lower then 3 and thus the "
                               "Shapiro-Wilk test is not applicable for the residuals."
    )
    random_effects = assess_normality(
        fit.random_intercepts, "Random_effect", ShapiroGuard.EXCLUSIVE, notices=notices,
        not_applicable_message="Number of domains exceeds 5000 or is lower then 3 and thus the "
                               "Shapiro-Wilk test is not applicable for the random effects."
    )

    r_squared = r_squared_mixed(fit.fixed_predictions, fit.random_intercept_variance, fit.residual_variance)

    return DiagnosticSummary(
        variant=ModelVariant.EBP,
        n_domains_out_of_sample=framework.n_domains_unobserved,
        n_domains_in_sample=framework.n_domains_sampled,
        n_units_sample=framework.n_units_sampled,
        n_units_population=framework.n_units_population,
        domain_sizes=size_dom,
        transformation=ebp_transformation_table(result.transformation, result.method,
                                                digits=_shift_digits(config_manager)),
        normality=normality_table([residuals, random_effects]),
        icc=icc(fit.random_intercept_variance, fit.residual_variance),
        coefficient_of_determination=r_squared.to_frame(),
        call=result.call,
        notices=tuple(notices)
    )


def _summarize_fh(result: FittedModelResult) -> DiagnosticSummary:
    model = result.model
    if not isinstance(model, FHModelInternals):
        raise TypeError("FH results need FHModelInternals as model.")

    notices: List[Notice] = []
    std_residuals = assess_normality(
        model.std_real_residuals, "Standardized_Residuals", ShapiroGuard.INCLUSIVE,
        omit_nan=True, notices=notices,
        not_applicable_message="Number of domains must be between 3 and 5000, otherwise the "
                               "Shapiro-Wilk test is not applicable."
    )
    random_effects = assess_normality(
        model.random_effects, "Random_effects", ShapiroGuard.INCLUSIVE,
        omit_nan=True, notices=notices
    )

    return DiagnosticSummary(
        variant=ModelVariant.FH,
        n_domains_out_of_sample=result.framework.n_domains_unobserved,
        n_domains_in_sample=result.framework.n_domains_sampled,
        transformation=fh_transformation_table(result.transformation),
        normality=normality_table([std_residuals, random_effects]),
        model=model,
        method=result.method,
        call=result.call,
        notices=tuple(notices)
    )


def summarize(result: FittedModelResult, config_manager=None) -> DiagnosticSummary:
    """Summarize a fitted Direct, EBP or FH result.

    Parameters
    ----------
    result : FittedModelResult
        Fitted estimation result
    config_manager : ConfigurationManager, optional
        Configuration source (defaults to the global configuration)

    Returns
    -------
    DiagnosticSummary
        Variant-tagged summary

    Raises
    ------
    TypeError
        If ``result`` is not a fitted result of a known variant
    """
    if not isinstance(result, FittedModelResult):
        raise TypeError("First object needs to be of class emdi.")

    logger.info("Summarizing %s result", result.variant.value)

    if result.variant is ModelVariant.DIRECT:
        return _summarize_direct(result)
    elif result.variant is ModelVariant.EBP:
        return _summarize_ebp(result, config_manager)
    elif result.variant is ModelVariant.FH:
        return _summarize_fh(result)
    raise TypeError("First object needs to be of class emdi.")
