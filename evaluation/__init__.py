"""Model evaluation for small-area estimation results.

This package provides:
- ``compare``: Brown test and synthetic/direct correlation for FH models
- ``summarize``: variant-specific model-fit summaries
"""

from .compare import (
    ComparisonResult,
    compare
)

from .summary import (
    DiagnosticSummary,
    SIZE_SUMMARY_LABELS,
    sample_size_table,
    domain_size_summary,
    ebp_transformation_table,
    fh_transformation_table,
    summarize
)

__all__ = [
    # Comparison
    'ComparisonResult',
    'compare',

    # Summary
    'DiagnosticSummary',
    'SIZE_SUMMARY_LABELS',
    'sample_size_table',
    'domain_size_summary',
    'ebp_transformation_table',
    'fh_transformation_table',
    'summarize'
]

# Version info
__version__ = '1.0.0'
