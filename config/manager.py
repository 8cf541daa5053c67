"""YAML configuration management for SAE-Diagnostics.

Configuration files live in the ``config/`` directory next to this module.
Every ``*.yaml`` file found there is loaded in sorted order and merged into
a single nested dictionary; an explicit file passed by the caller is merged
last and wins.
"""

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent

DEFAULT_CONFIG: Dict[str, Any] = {
    'brown_test': {
        'stable_upper_tail': False,
    },
    'reporting': {
        'correlation_digits': 2,
        'shift_parameter_digits': 3,
    },
    'plots': {
        'create_plots': True,
        'dpi': 300,
    },
    'logging': {
        'level': 'INFO',
    },
}

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(ValueError):
    """Raised when a configuration file cannot be read or is malformed."""


def _deep_update(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


class ConfigurationManager:
    """Loads, merges and serves the diagnostics configuration."""

    def __init__(self, config_dir: Optional[Path] = None,
                 extra_files: Optional[Iterable[Union[str, Path]]] = None):
        """Initialize the configuration manager.

        Parameters
        ----------
        config_dir : Path, optional
            Directory scanned for ``*.yaml`` files (defaults to the package directory)
        extra_files : iterable of path-like, optional
            Additional YAML files merged after the directory contents
        """
        self.config_dir = Path(config_dir) if config_dir is not None else CONFIG_DIR
        self.loaded_files: List[Path] = []
        self._config = deepcopy(DEFAULT_CONFIG)

        if self.config_dir.is_dir():
            for path in sorted(self.config_dir.glob("*.yaml")):
                self.load_file(path)
        else:
            logger.warning("Configuration directory not found: %s - using defaults", self.config_dir)

        for path in extra_files or ():
            self.load_file(Path(path))

    def load_file(self, path: Path) -> None:
        """Merge a single YAML file into the active configuration."""
        try:
            with open(path, "r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read configuration file {path}: {e}") from e

        if not isinstance(payload, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping at the top level")

        _deep_update(self._config, payload)
        self.loaded_files.append(Path(path))
        logger.debug("Loaded configuration file %s", path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Look up a value using dot notation, e.g. ``'reporting.correlation_digits'``."""
        node: Any = self._config
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def as_dict(self) -> Dict[str, Any]:
        return deepcopy(self._config)

    def validate_configuration(self) -> Dict[str, List[str]]:
        """Check value types and ranges.

        Returns
        -------
        dict
            Mapping of section name to a list of error messages; empty when valid
        """
        errors: Dict[str, List[str]] = {}

        def _add(section: str, message: str) -> None:
            errors.setdefault(section, []).append(message)

        if not isinstance(self.get('brown_test.stable_upper_tail'), bool):
            _add('brown_test', "stable_upper_tail must be a boolean")

        for key in ('correlation_digits', 'shift_parameter_digits'):
            value = self.get(f'reporting.{key}')
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                _add('reporting', f"{key} must be a non-negative integer")

        dpi = self.get('plots.dpi')
        if not isinstance(dpi, int) or isinstance(dpi, bool) or dpi <= 0:
            _add('plots', "dpi must be a positive integer")

        level = str(self.get('logging.level', '')).upper()
        if level not in VALID_LOG_LEVELS:
            _add('logging', f"level must be one of {', '.join(VALID_LOG_LEVELS)}")

        return errors

    def get_configuration_summary(self) -> Dict[str, Any]:
        return {
            'config_dir': str(self.config_dir),
            'loaded_configs': [p.name for p in self.loaded_files],
            'sections': sorted(self._config.keys()),
        }


_config_manager: Optional[ConfigurationManager] = None


def get_config(extra_files: Optional[Iterable[Union[str, Path]]] = None) -> ConfigurationManager:
    """Return the process-wide configuration manager, creating it on first use."""
    global _config_manager
    if _config_manager is None or extra_files:
        _config_manager = ConfigurationManager(extra_files=extra_files)
    return _config_manager


def reset_config() -> None:
    """Drop the cached configuration manager (mainly for tests)."""
    global _config_manager
    _config_manager = None
