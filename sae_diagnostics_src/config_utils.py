# sae_diagnostics_src/config_utils.py

import logging
from pathlib import Path
from typing import Optional

from config import ConfigurationError, get_config, reset_config

logger = logging.getLogger(__name__)

# Global configuration manager used by the application layer
config_manager = None


def initialize_config(config_file: Optional[Path] = None):
    """
    Initializes the global configuration manager.
    Loads the packaged YAML defaults plus an optional user file. Validation problems are
    logged as warnings; an unreadable user file is reported and the defaults are kept.
    """
    global config_manager
    extra_files = [config_file] if config_file is not None else None
    try:
        if extra_files:
            reset_config()
        config_manager = get_config(extra_files=extra_files)
    except ConfigurationError as e:
        logger.error("Failed to initialize configuration: %s. Using defaults.", e)
        reset_config()
        config_manager = get_config()

    validation_errors = config_manager.validate_configuration()
    if validation_errors:
        logger.warning("Configuration validation warnings: %s", validation_errors)
    return config_manager


def get_config_value(key_path: str, default=None, args=None, cli_param=None):
    """
    Resolve a diagnostics setting such as ``brown_test.stable_upper_tail``.

    A flag given on the command line (``args.<cli_param>`` not None) wins over
    the YAML value, which wins over ``default``. Before ``initialize_config``
    has run only the flag and the default are consulted.

    Examples
    --------
    >>> get_config_value("plots.dpi", 300)
    300
    """
    flag = getattr(args, cli_param, None) if args is not None and cli_param else None
    if flag is not None:
        return flag

    if config_manager is None:
        return default

    configured = config_manager.get(key_path)
    return default if configured is None else configured
