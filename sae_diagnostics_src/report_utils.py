# sae_diagnostics_src/report_utils.py

"""
Text reports for comparison results and model summaries.

The functions only read the result objects; nothing is recomputed here.
"""

import logging
from typing import List

import pandas as pd

from evaluation import ComparisonResult, DiagnosticSummary
from results import ModelVariant

from .config_utils import get_config_value

logger = logging.getLogger(__name__)


def _frame_text(df: pd.DataFrame) -> str:
    return df.to_string()


def format_comparison(result: ComparisonResult, digits: int = None) -> str:
    """
    Render the Brown test and the synthetic/direct correlation.

    Parameters
    ----------
    result : ComparisonResult
        Output of ``evaluation.compare``
    digits : int, optional
        Rounding of the correlation (defaults to ``reporting.correlation_digits``)

    Returns
    -------
    str
        Report text
    """
    if digits is None:
        digits = int(get_config_value('reporting.correlation_digits', 2))

    lines: List[str] = []
    if result.brown is not None:
        lines.append("Brown test")
        lines.append("")
        lines.append(f"Null hypothesis: {result.brown.null_hypothesis}")
        lines.append("")
        lines.append(_frame_text(result.brown.to_frame()))

    if result.synthetic_correlation is not None:
        lines.append("")
        lines.append(f"Correlation between synthetic part and direct estimator:  "
                     f"{round(result.synthetic_correlation, digits)}")

    return "\n".join(lines).strip("\n") + "\n"


def _transformation_lines(summary: DiagnosticSummary) -> List[str]:
    if summary.transformation is None:
        return ["Transformation: No transformation "]
    return ["Transformation:", _frame_text(summary.transformation)]


def _format_ebp(summary: DiagnosticSummary) -> List[str]:
    lines = [
        "Empirical Best Prediction",
        "",
        "Call:",
        f" {summary.call}",
        "",
        f"Out-of-sample domains:  {summary.n_domains_out_of_sample}",
        f"In-sample domains:  {summary.n_domains_in_sample}",
        "",
        "Sample sizes:",
        f"Units in sample:  {summary.n_units_sample}",
        f"Units in population:  {summary.n_units_population}",
        _frame_text(summary.domain_sizes) if summary.domain_sizes is not None else "",
        "",
        "Explanatory measures:",
        _frame_text(summary.coefficient_of_determination),
        "",
        "Residual diagnostics:",
        _frame_text(summary.normality),
        "",
        f"ICC:  {summary.icc}",
        "",
    ]
    return lines + _transformation_lines(summary)


def _format_direct(summary: DiagnosticSummary) -> List[str]:
    lines = [
        "Direct estimation",
        "",
        "Call:",
        f" {summary.call}",
        "",
        f"In-sample domains:  {summary.n_domains_in_sample}",
        "",
        "Sample sizes:",
        f"Units in sample:  {summary.n_units_sample}",
    ]
    if summary.domain_sizes is not None:
        lines.append(_frame_text(summary.domain_sizes))
    if summary.sample_size_table is not None:
        lines.append("")
        lines.append("Units in each Domain:")
        lines.append(summary.sample_size_table.to_string())
    return lines


def _format_fh(summary: DiagnosticSummary) -> List[str]:
    model = summary.model
    method = summary.method
    lines = [
        "Call:",
        f" {summary.call}",
        "",
        f"Out-of-sample domains:  {summary.n_domains_out_of_sample}",
        f"In-sample domains:  {summary.n_domains_in_sample}",
        "",
        "Variance and MSE estimation:",
    ]

    if method is not None and method.is_robust:
        lines.append(f"Variance estimation method: robustified ml, {method.method}")
        if method.method == "reblup":
            lines.append(f"k =  {model.k}")
        else:
            lines.append(f"k =  {model.k} , c =  {model.c}")
    else:
        lines.append(f"Variance estimation method:  {method.method if method is not None else None}")

    if model.correlation == "no":
        lines.append(f"Estimated variance component(s):  {model.variance}")
    else:
        lines.append(f"Estimated variance component(s):  {model.correlation} correlation assumed")
        variance = model.variance
        lines.append(variance.to_string() if hasattr(variance, 'to_string') else str(variance))

    lines.append(f"MSE method:  {method.mse_method if method is not None else None}")
    lines.append("")
    lines.append("Coefficients:")
    lines.append(_frame_text(model.coefficients) if model.coefficients is not None else "None")
    lines.append("")
    lines.append("Explanatory measures:")
    if model.model_select is None:
        lines.append("No explanatory measures provided ")
    else:
        lines.append(_frame_text(model.model_select))
    lines.append("")
    lines.append("Residual diagnostics:")
    lines.append(_frame_text(summary.normality))
    lines.append("")
    return lines + _transformation_lines(summary)


def format_summary(summary: DiagnosticSummary) -> str:
    """
    Render a variant-specific summary report.

    Parameters
    ----------
    summary : DiagnosticSummary
        Output of ``evaluation.summarize``

    Returns
    -------
    str
        Report text
    """
    if summary.variant is ModelVariant.EBP:
        lines = _format_ebp(summary)
    elif summary.variant is ModelVariant.DIRECT:
        lines = _format_direct(summary)
    elif summary.variant is ModelVariant.FH:
        lines = _format_fh(summary)
    else:
        raise TypeError(f"Unknown summary variant: {summary.variant!r}")
    return "\n".join(lines) + "\n"
