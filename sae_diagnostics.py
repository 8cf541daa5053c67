#!/usr/bin/env python3
"""
Small-area estimation diagnostics for Fay-Herriot results.

Usage
-----
    python sae_diagnostics.py --help
    python sae_diagnostics.py --indicators fh_ind.csv --mse fh_mse.csv --gamma fh_gamma.csv

The implementation lives in sae_diagnostics_src/ (application layer) and the
results/, diagnostics/, evaluation/ and validation/ packages.
"""

import sys

from sae_diagnostics_src.main import main

if __name__ == "__main__":
    sys.exit(main())
