# sae_diagnostics_src/__init__.py

"""
SAE-Diagnostics - Application Layer

Command-line tooling and presentation on top of the diagnostics packages
(``results``, ``diagnostics``, ``evaluation``, ``validation``, ``config``).

Key Components
--------------
- config_utils: Configuration initialization and CLI override support
- parsing_utils: Command-line value validation
- file_utils: Loading fitted FH results from CSV tables
- report_utils: Text reports for comparison results and summaries
- plotting_utils: Q-Q plots and direct/model scatter plots
- main: Command-line entry point

Usage
-----
    # Command-line usage
    python -m sae_diagnostics_src.main --indicators fh_ind.csv --mse fh_mse.csv --gamma fh_gamma.csv

    # Programmatic usage
    from evaluation import compare, summarize
    from sae_diagnostics_src import format_comparison
"""

__version__ = "1.0.0"

from .config_utils import initialize_config, get_config_value
from .file_utils import load_fh_result
from .report_utils import format_comparison, format_summary
from .plotting_utils import save_diagnostic_plots
from .main import main

__all__ = [
    "main",
    "initialize_config",
    "get_config_value",
    "load_fh_result",
    "format_comparison",
    "format_summary",
    "save_diagnostic_plots",
    "__version__",
]
