"""Read-only view over a fitted small-area estimation result.

A ``FittedModelResult`` carries everything the diagnostics need from a
fitted Direct, EBP or Fay-Herriot estimation: point and MSE estimates per
domain, the in-/out-of-sample partition, the sampling framework and the
model internals. The objects are produced by the external fitting routines
and are never modified here.

Layout of the estimate tables
-----------------------------
``indicators`` and ``mse`` hold one row per domain with the columns

- ``Domain``: domain identifier
- ``Direct``: direct estimator
- ``FH`` or ``EBP``: model-based estimator (column named after the variant)
- ``Out``: 0 for in-sample domains, nonzero for out-of-sample domains
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

DOMAIN_COL = "Domain"
DIRECT_COL = "Direct"
OUT_COL = "Out"
GAMMA_COL = "Gamma"


class ModelVariant(Enum):
    """Estimation approaches a result can come from."""
    DIRECT = "direct"
    EBP = "ebp"
    FH = "fh"


class TransformationType(Enum):
    """Transformations applied to the target variable before fitting."""
    NO = "no"
    LOG = "log"
    BOX_COX = "box.cox"
    ARCSIN = "arcsin"

    @classmethod
    def parse(cls, tag: Union[str, "TransformationType", None]) -> "TransformationType":
        if isinstance(tag, cls):
            return tag
        if tag is None:
            return cls.NO
        normalized = str(tag).strip().lower()
        aliases = {
            "none": cls.NO,
            "no": cls.NO,
            "log": cls.LOG,
            "box.cox": cls.BOX_COX,
            "box-cox": cls.BOX_COX,
            "boxcox": cls.BOX_COX,
            "arcsin": cls.ARCSIN,
        }
        if normalized not in aliases:
            raise ValueError(f"Unknown transformation: {tag!r}")
        return aliases[normalized]


@dataclass(frozen=True)
class TransformationInfo:
    """Transformation and back-transformation used by a fitted model."""
    transformation: TransformationType = TransformationType.NO
    backtransformation: Optional[str] = None   # FH only, e.g. "naive", "bc", "sm"
    optimal_lambda: Optional[float] = None     # Box-Cox only
    shift_parameter: Optional[float] = None    # log and Box-Cox

    def __post_init__(self):
        object.__setattr__(self, 'transformation', TransformationType.parse(self.transformation))


@dataclass(frozen=True)
class SampleFramework:
    """Domain and unit counts describing the sample and population data."""
    n_domains_sampled: int
    n_domains_unobserved: int = 0
    n_units_sampled: Optional[int] = None
    n_units_population: Optional[int] = None
    sample_domains: Optional[np.ndarray] = None       # domain of each sampled unit
    population_domains: Optional[np.ndarray] = None   # domain of each population unit


@dataclass(frozen=True)
class EstimationMethod:
    """Variance estimation and MSE method of a fitted model."""
    method: str
    mse_method: Optional[str] = None

    @property
    def is_robust(self) -> bool:
        return self.method in ("reblup", "reblupbc")


@dataclass(frozen=True)
class FittingCall:
    """Provenance of the fitting call; used for display only."""
    function: str
    arguments: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        args = ", ".join(f"{key} = {value!r}" for key, value in self.arguments.items())
        return f"{self.function}({args})"


@dataclass(frozen=True)
class FHModelInternals:
    """Model components of a fitted Fay-Herriot model."""
    random_effects: np.ndarray
    std_real_residuals: np.ndarray
    coefficients: Optional[pd.DataFrame] = None
    variance: Union[float, pd.Series, pd.DataFrame, None] = None
    correlation: str = "no"
    gamma: Optional[pd.DataFrame] = None          # columns Domain, Gamma; None for additive models
    k: Optional[float] = None                     # robust tuning constant (reblup, reblupbc)
    c: Optional[float] = None                     # bias-correction constant (reblupbc)
    model_select: Optional[pd.DataFrame] = None   # information criteria / R2 measures

    @property
    def has_gamma(self) -> bool:
        return self.gamma is not None


@dataclass(frozen=True)
class EBPModelFit:
    """Quantities of the nested-error regression behind an EBP fit.

    Attributes
    ----------
    pearson_residuals : np.ndarray
        Population-level (fixed part only) residuals divided by the residual
        standard deviation
    random_intercepts : np.ndarray
        Predicted random intercepts, one per sampled domain
    fixed_predictions : np.ndarray
        Fitted values of the fixed part (X beta) for the sampled units
    random_intercept_variance : float
        Estimated variance of the random intercept
    residual_variance : float
        Estimated unit-level error variance
    """
    pearson_residuals: np.ndarray
    random_intercepts: np.ndarray
    fixed_predictions: np.ndarray
    random_intercept_variance: float
    residual_variance: float

    @classmethod
    def from_mixedlm(cls, results) -> "EBPModelFit":
        """Build from a fitted statsmodels ``MixedLMResults`` random-intercept model.

        Parameters
        ----------
        results : statsmodels.regression.mixed_linear_model.MixedLMResults
            Fitted model with a single random intercept per group

        Returns
        -------
        EBPModelFit
            Extracted residuals, random intercepts and variance components
        """
        exog = np.asarray(results.model.exog, dtype=float)
        endog = np.asarray(results.model.endog, dtype=float)
        fe_params = np.asarray(results.fe_params, dtype=float)

        fixed = exog @ fe_params
        residual_variance = float(results.scale)
        pearson = (endog - fixed) / np.sqrt(residual_variance)

        random_intercepts = np.array(
            [float(np.asarray(effect)[0]) for effect in results.random_effects.values()]
        )
        random_intercept_variance = float(np.asarray(results.cov_re)[0, 0])

        logger.debug("Extracted EBP fit from MixedLM: %d units, %d domains",
                     len(endog), len(random_intercepts))

        return cls(
            pearson_residuals=pearson,
            random_intercepts=random_intercepts,
            fixed_predictions=fixed,
            random_intercept_variance=random_intercept_variance,
            residual_variance=residual_variance
        )


ModelInternals = Union[FHModelInternals, EBPModelFit]


@dataclass(frozen=True)
class FittedModelResult:
    """A fitted Direct, EBP or FH estimation result."""
    variant: ModelVariant
    indicators: pd.DataFrame
    framework: SampleFramework
    mse: Optional[pd.DataFrame] = None
    model: Optional[ModelInternals] = None
    transformation: Optional[TransformationInfo] = None
    method: Optional[EstimationMethod] = None
    call: Optional[FittingCall] = None

    @property
    def model_column(self) -> str:
        """Name of the model-based estimate column ('FH' or 'EBP')."""
        if self.variant is ModelVariant.FH:
            return "FH"
        if self.variant is ModelVariant.EBP:
            return "EBP"
        raise TypeError("Direct estimation results carry no model-based estimates.")

    @property
    def has_mse(self) -> bool:
        return self.mse is not None and self.model_column in self.mse.columns

    @property
    def has_out_of_sample(self) -> bool:
        return self.framework.n_domains_unobserved > 0

    def in_sample_mask(self) -> np.ndarray:
        """Boolean mask over the indicator rows selecting in-sample domains."""
        return self.indicators[OUT_COL].to_numpy() == 0

    def in_sample_direct(self) -> np.ndarray:
        return self.indicators.loc[self.in_sample_mask(), DIRECT_COL].to_numpy(dtype=float)

    def in_sample_estimates(self) -> np.ndarray:
        return self.indicators.loc[self.in_sample_mask(), self.model_column].to_numpy(dtype=float)

    def in_sample_mse(self) -> Dict[str, np.ndarray]:
        """In-sample MSEs of the direct and model-based estimators.

        Returns
        -------
        dict
            Keys 'direct' and 'model'

        Raises
        ------
        ValueError
            If the result carries no MSE estimates
        """
        if not self.has_mse:
            raise ValueError("Result does not contain MSE estimates")
        mask = self.mse[OUT_COL].to_numpy() == 0
        return {
            'direct': self.mse.loc[mask, DIRECT_COL].to_numpy(dtype=float),
            'model': self.mse.loc[mask, self.model_column].to_numpy(dtype=float),
        }

    def in_sample_gamma(self) -> Optional[np.ndarray]:
        """In-sample gamma weights of an FH model, or None for additive models."""
        if not isinstance(self.model, FHModelInternals) or self.model.gamma is None:
            return None
        gamma = self.model.gamma[GAMMA_COL].to_numpy(dtype=float)
        return gamma[self.in_sample_mask()]
