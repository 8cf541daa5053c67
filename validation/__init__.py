"""Notices, error taxonomy and result validation for SAE-Diagnostics.

This package provides:
- Severity-tagged notices used as the advisory channel of all diagnostics
- Precondition and validation exceptions
- Consistency checks for fitted results
"""

from .pipeline import (
    Severity,
    Notice,
    ValidationResult,
    PreconditionError,
    ResultValidationError,
    ResultValidator,
    validate_fitted_result,
    ensure_valid_result
)

__all__ = [
    'Severity',
    'Notice',
    'ValidationResult',
    'PreconditionError',
    'ResultValidationError',
    'ResultValidator',
    'validate_fitted_result',
    'ensure_valid_result'
]

# Version info
__version__ = '1.0.0'
