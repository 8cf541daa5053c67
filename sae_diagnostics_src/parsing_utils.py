# sae_diagnostics_src/parsing_utils.py

from typing import Optional
import logging

from results import TransformationType

logger = logging.getLogger(__name__)


def validate_log_level(log_level: str) -> str:
    """
    Validate and normalize a logging level name.

    Parameters
    ----------
    log_level : str
        Logging level to validate

    Returns
    -------
    str
        Validated logging level

    Raises
    ------
    ValueError
        If the logging level is not supported
    """
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    level_upper = log_level.upper()
    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level '{log_level}'. Must be one of: {valid_levels}")
    return level_upper


def parse_transformation(tag: Optional[str], backtransformation: Optional[str] = None) -> str:
    """
    Validate a transformation tag given on the command line.

    Accepts the aliases understood by ``TransformationType.parse`` ('none', 'box-cox', ...)
    and returns the canonical tag. A back-transformation is only meaningful together with
    an actual transformation.

    Raises
    ------
    ValueError
        If the tag is unknown or a back-transformation is given without a transformation
    """
    canonical = TransformationType.parse(tag)
    if canonical is TransformationType.NO and backtransformation:
        raise ValueError("A back-transformation requires a transformation other than 'no'")
    return canonical.value
