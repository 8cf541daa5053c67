"""Statistical diagnostics for small-area estimation models.

This package provides:
- Brown goodness-of-fit test for model-based vs. direct estimates
- Extraction of the synthetic part of Fay-Herriot estimates
- Skewness, kurtosis and guarded Shapiro-Wilk normality tests
- Marginal/conditional R2 and intraclass correlation for random-intercept models
"""

from .brown_test import (
    BrownTestOutcome,
    NULL_HYPOTHESIS,
    brown_statistic,
    brown_test
)

from .synthetic_part import (
    extract_synthetic_part,
    synthetic_direct_correlation
)

from .normality import (
    ShapiroGuard,
    NormalityResult,
    SHAPIRO_MIN_N,
    SHAPIRO_MAX_N,
    skewness,
    kurtosis,
    shapiro_applicable,
    shapiro_wilk,
    assess_normality,
    normality_table
)

from .mixed_r2 import (
    CoefficientOfDetermination,
    icc,
    r_squared_mixed
)

__all__ = [
    # Brown test
    'BrownTestOutcome',
    'NULL_HYPOTHESIS',
    'brown_statistic',
    'brown_test',

    # Synthetic part
    'extract_synthetic_part',
    'synthetic_direct_correlation',

    # Normality
    'ShapiroGuard',
    'NormalityResult',
    'SHAPIRO_MIN_N',
    'SHAPIRO_MAX_N',
    'skewness',
    'kurtosis',
    'shapiro_applicable',
    'shapiro_wilk',
    'assess_normality',
    'normality_table',

    # Mixed model fit
    'CoefficientOfDetermination',
    'icc',
    'r_squared_mixed'
]

# Version info
__version__ = '1.0.0'
