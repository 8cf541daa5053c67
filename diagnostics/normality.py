"""Normality diagnostics for residual-like vectors.

Skewness and kurtosis use the plain moment ratios (m3 / m2^1.5 and
m4 / m2^2, i.e. kurtosis is not reduced by 3). The Shapiro-Wilk test only
runs inside a sample-size guard; two guards exist because the EBP and FH
summaries bound the lower end differently:

- ``ShapiroGuard.EXCLUSIVE``: 3 < n < 5000 (EBP)
- ``ShapiroGuard.INCLUSIVE``: 3 <= n < 5000 (FH)

The guard is evaluated on the full vector length, NaN entries included.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from validation import Notice, Severity

logger = logging.getLogger(__name__)

SHAPIRO_MIN_N = 3
SHAPIRO_MAX_N = 5000


class ShapiroGuard(Enum):
    """Sample-size guards for the Shapiro-Wilk test."""
    EXCLUSIVE = "exclusive"
    INCLUSIVE = "inclusive"


@dataclass(frozen=True)
class NormalityResult:
    """Moment statistics and Shapiro-Wilk outcome for one vector."""
    label: str
    skewness: float
    kurtosis: float
    shapiro_w: Optional[float] = None
    shapiro_p: Optional[float] = None

    @property
    def shapiro_available(self) -> bool:
        return self.shapiro_w is not None


def skewness(values: Sequence[float], omit_nan: bool = False) -> float:
    """Moment coefficient of skewness m3 / m2^1.5."""
    x = np.asarray(values, dtype=float)
    return float(stats.skew(x, bias=True, nan_policy='omit' if omit_nan else 'propagate'))


def kurtosis(values: Sequence[float], omit_nan: bool = False) -> float:
    """Pearson kurtosis m4 / m2^2 (3 for a normal distribution)."""
    x = np.asarray(values, dtype=float)
    return float(stats.kurtosis(x, fisher=False, bias=True,
                                nan_policy='omit' if omit_nan else 'propagate'))


def shapiro_applicable(n: int, guard: ShapiroGuard) -> bool:
    if guard is ShapiroGuard.EXCLUSIVE:
        return SHAPIRO_MIN_N < n < SHAPIRO_MAX_N
    return SHAPIRO_MIN_N <= n < SHAPIRO_MAX_N


def shapiro_wilk(values: Sequence[float], guard: ShapiroGuard) -> Tuple[Optional[float], Optional[float]]:
    """Shapiro-Wilk statistic and p-value, or (None, None) outside the guard.

    Parameters
    ----------
    values : array-like
        Residual-like vector; NaN entries count towards the guard but are
        dropped before testing
    guard : ShapiroGuard
        Sample-size guard to apply

    Returns
    -------
    tuple
        (W, p_value) as floats, or (None, None) when not applicable
    """
    x = np.asarray(values, dtype=float)
    if not shapiro_applicable(len(x), guard):
        logger.debug("Shapiro-Wilk skipped: n=%d outside %s guard", len(x), guard.value)
        return None, None

    result = stats.shapiro(x[~np.isnan(x)])
    return float(result[0]), float(result[1])


def assess_normality(values: Sequence[float],
                     label: str,
                     guard: ShapiroGuard,
                     omit_nan: bool = False,
                     notices: Optional[List[Notice]] = None,
                     not_applicable_message: Optional[str] = None) -> NormalityResult:
    """Skewness, kurtosis and guarded Shapiro-Wilk test for one vector.

    When the Shapiro-Wilk test is not applicable a WARNING notice is
    appended to ``notices`` (if given).
    """
    x = np.asarray(values, dtype=float)
    logger.debug("Assessing normality of %s (n=%d)", label, len(x))

    w_value, p_value = shapiro_wilk(x, guard)
    if w_value is None and notices is not None:
        if guard is ShapiroGuard.EXCLUSIVE:
            bounds = f"between {SHAPIRO_MIN_N} and {SHAPIRO_MAX_N} (exclusive)"
        else:
            bounds = f"at least {SHAPIRO_MIN_N} and below {SHAPIRO_MAX_N}"
        message = not_applicable_message or (
            f"Number of observations ({len(x)}) must be {bounds}; "
            f"the Shapiro-Wilk test is not applicable for {label}."
        )
        notices.append(Notice(
            severity=Severity.WARNING,
            message=message,
            component="normality",
            details={'label': label, 'n': len(x)}
        ).log())

    return NormalityResult(
        label=label,
        skewness=skewness(x, omit_nan=omit_nan),
        kurtosis=kurtosis(x, omit_nan=omit_nan),
        shapiro_w=w_value,
        shapiro_p=p_value
    )


def normality_table(results: Sequence[NormalityResult]) -> pd.DataFrame:
    """Stack normality results into a table indexed by label.

    Unavailable Shapiro-Wilk values appear as NaN.
    """
    rows = {
        r.label: {
            'Skewness': r.skewness,
            'Kurtosis': r.kurtosis,
            'Shapiro_W': np.nan if r.shapiro_w is None else r.shapiro_w,
            'Shapiro_p': np.nan if r.shapiro_p is None else r.shapiro_p,
        }
        for r in results
    }
    return pd.DataFrame.from_dict(rows, orient='index', columns=['Skewness', 'Kurtosis', 'Shapiro_W', 'Shapiro_p'])
