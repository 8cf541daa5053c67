"""Structured notices and consistency checks for fitted results.

This module provides the advisory channel shared by the diagnostics and the
checks that guard a ``FittedModelResult`` before it is diagnosed.

Features:
- Severity-tagged notices collected instead of printed
- Error taxonomy (precondition failures, invalid results)
- Consistency checks between estimates, MSEs, framework and model internals
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass
from enum import Enum

import numpy as np

from results import (
    DIRECT_COL, DOMAIN_COL, OUT_COL, GAMMA_COL,
    ModelVariant, FittedModelResult, FHModelInternals, EBPModelFit
)

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Notice and validation issue severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Notice:
    """Advisory message attached to a diagnostic result."""
    severity: Severity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None

    def log(self) -> "Notice":
        """Mirror the notice to the module logger and return it."""
        level = logging.INFO if self.severity is Severity.INFO else logging.WARNING
        logger.log(level, "[%s] %s", self.component, self.message)
        return self


@dataclass
class ValidationResult:
    """Outcome of validating a fitted result."""
    is_valid: bool
    issues: List[Notice]
    metrics: Dict[str, Any]

    @property
    def has_errors(self) -> bool:
        return any(issue.severity in [Severity.ERROR, Severity.CRITICAL] for issue in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(issue.severity == Severity.WARNING for issue in self.issues)

    def get_issues_by_severity(self, severity: Severity) -> List[Notice]:
        return [issue for issue in self.issues if issue.severity == severity]

    def summary(self) -> str:
        total_issues = len(self.issues)
        errors = len(self.get_issues_by_severity(Severity.ERROR))
        criticals = len(self.get_issues_by_severity(Severity.CRITICAL))
        warnings = len(self.get_issues_by_severity(Severity.WARNING))

        status = "PASS" if self.is_valid and not self.has_errors else "FAIL"
        return f"Validation {status}: {total_issues} issues ({criticals} critical, {errors} error, {warnings} warning)"


class PreconditionError(Exception):
    """Required auxiliary data (e.g. MSE estimates) is missing."""


class ResultValidationError(Exception):
    """Exception raised when a fitted result fails its consistency checks."""

    def __init__(self, message: str, validation_result: Optional[ValidationResult] = None):
        super().__init__(message)
        self.validation_result = validation_result


class ResultValidator:
    """Consistency checks for ``FittedModelResult`` objects."""

    def __init__(self):
        self.issues: List[Notice] = []
        self.metrics: Dict[str, Any] = {}

    def validate(self, result: FittedModelResult) -> ValidationResult:
        """Run all checks applicable to the result's variant.

        Parameters
        ----------
        result : FittedModelResult
            Fitted result to check

        Returns
        -------
        ValidationResult
            Collected issues and basic metrics
        """
        self.issues = []
        self.metrics = {}

        if not isinstance(result, FittedModelResult):
            raise TypeError("Object needs to be of class FittedModelResult.")

        logger.debug("Validating %s result", result.variant.value)

        self._validate_framework(result)
        if result.variant in (ModelVariant.FH, ModelVariant.EBP):
            self._validate_estimates(result)
        if result.variant is ModelVariant.FH:
            self._validate_fh_internals(result)
        elif result.variant is ModelVariant.EBP:
            self._validate_ebp_internals(result)

        is_valid = not any(issue.severity in [Severity.ERROR, Severity.CRITICAL] for issue in self.issues)
        validation = ValidationResult(is_valid=is_valid, issues=list(self.issues), metrics=dict(self.metrics))
        logger.info("Validation completed: %s", validation.summary())
        return validation

    def _add(self, severity: Severity, message: str, component: str,
             details: Optional[Dict[str, Any]] = None) -> None:
        self.issues.append(Notice(severity=severity, message=message, component=component, details=details))

    def _validate_framework(self, result: FittedModelResult) -> None:
        framework = result.framework
        if framework.n_domains_sampled < 0 or framework.n_domains_unobserved < 0:
            self._add(Severity.ERROR, "Domain counts must be non-negative", "framework")

        if result.variant is not ModelVariant.DIRECT and framework.sample_domains is not None:
            n_units = len(framework.sample_domains)
            if framework.n_units_sampled is not None and framework.n_units_sampled != n_units:
                self._add(Severity.WARNING,
                          f"n_units_sampled ({framework.n_units_sampled}) differs from the "
                          f"length of the sample domain vector ({n_units})",
                          "framework")

    def _validate_estimates(self, result: FittedModelResult) -> None:
        indicators = result.indicators
        required = [DIRECT_COL, result.model_column, OUT_COL]
        missing = [col for col in required if col not in indicators.columns]
        if missing:
            self._add(Severity.CRITICAL, f"Indicator table is missing columns: {missing}", "estimates")
            return

        n_in = int((indicators[OUT_COL] == 0).sum())
        n_out = int(len(indicators) - n_in)
        self.metrics['n_domains'] = len(indicators)
        self.metrics['n_in_sample'] = n_in

        if n_in != result.framework.n_domains_sampled:
            self._add(Severity.ERROR,
                      f"Framework reports {result.framework.n_domains_sampled} in-sample domains "
                      f"but the indicator table flags {n_in}",
                      "estimates")
        if n_out != result.framework.n_domains_unobserved:
            self._add(Severity.ERROR,
                      f"Framework reports {result.framework.n_domains_unobserved} out-of-sample domains "
                      f"but the indicator table flags {n_out}",
                      "estimates")

        if result.mse is None:
            self._add(Severity.INFO, "No MSE estimates available", "mse")
            return

        mse = result.mse
        if len(mse) != len(indicators):
            self._add(Severity.ERROR,
                      f"MSE table has {len(mse)} rows, indicator table has {len(indicators)}",
                      "mse")
            return
        if OUT_COL in mse.columns and not np.array_equal(mse[OUT_COL].to_numpy(), indicators[OUT_COL].to_numpy()):
            self._add(Severity.ERROR, "MSE and indicator tables disagree on the in-sample flags", "mse")
        if DOMAIN_COL in mse.columns and DOMAIN_COL in indicators.columns:
            if not np.array_equal(mse[DOMAIN_COL].to_numpy(), indicators[DOMAIN_COL].to_numpy()):
                self._add(Severity.ERROR, "MSE and indicator tables use a different domain ordering", "mse")

    def _validate_fh_internals(self, result: FittedModelResult) -> None:
        model = result.model
        if not isinstance(model, FHModelInternals):
            self._add(Severity.CRITICAL, "FH result does not carry FH model internals", "model")
            return

        n_in = result.framework.n_domains_sampled
        if model.gamma is not None:
            gamma = model.gamma[GAMMA_COL].to_numpy(dtype=float)
            if len(gamma) != len(result.indicators):
                self._add(Severity.ERROR,
                          f"Gamma has {len(gamma)} rows, indicator table has {len(result.indicators)}",
                          "model")
            elif np.any((gamma < 0) | (gamma > 1)):
                self._add(Severity.ERROR, "Gamma weights must lie in [0, 1]", "model")
            elif np.any(gamma[result.in_sample_mask()] == 1):
                self._add(Severity.WARNING,
                          "Gamma weight equal to 1 for an in-sample domain; the synthetic part is not finite there",
                          "model")
        elif len(np.atleast_1d(model.random_effects)) not in (1, n_in):
            self._add(Severity.ERROR,
                      f"Expected {n_in} random effects, got {len(np.atleast_1d(model.random_effects))}",
                      "model")

        if model.correlation != "no" and model.variance is None:
            self._add(Severity.WARNING, "Correlated model without variance components", "model")

    def _validate_ebp_internals(self, result: FittedModelResult) -> None:
        model = result.model
        if not isinstance(model, EBPModelFit):
            self._add(Severity.CRITICAL, "EBP result does not carry an EBP model fit", "model")
            return
        if model.random_intercept_variance < 0 or model.residual_variance <= 0:
            self._add(Severity.ERROR, "Variance components must be positive", "model")
        if len(model.fixed_predictions) != len(model.pearson_residuals):
            self._add(Severity.ERROR, "Fixed predictions and residuals differ in length", "model")


def validate_fitted_result(result: FittedModelResult) -> ValidationResult:
    """Validate a fitted result and return the collected issues."""
    return ResultValidator().validate(result)


def ensure_valid_result(result: FittedModelResult) -> ValidationResult:
    """Validate a fitted result, raising on errors.

    Raises
    ------
    ResultValidationError
        If any ERROR or CRITICAL issue is found
    """
    validation = validate_fitted_result(result)
    if validation.has_errors:
        for issue in validation.issues:
            if issue.severity in [Severity.ERROR, Severity.CRITICAL]:
                logger.error("  - %s: %s", issue.component, issue.message)
        raise ResultValidationError(validation.summary(), validation)
    return validation
