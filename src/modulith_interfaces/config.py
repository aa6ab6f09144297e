"""
Layered key-value configuration for named interface detection.

Values are looked up in this order:
1. Explicit overrides passed to the source (highest priority)
2. Environment variables
3. YAML configuration files (lowest priority)
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DETECTION_STRATEGY_PROPERTY = "modulith.named-interfaces-detection-strategy"

CONFIG_LOCATION_ENV_VAR = "MODULITH_CONFIG_LOCATION"
DEFAULT_CONFIG_FILES = ("application.yaml", "application.yml")


def env_var_name(key: str) -> str:
    """Translate a dotted configuration key into its environment variable name."""
    return key.upper().replace(".", "_").replace("-", "_")


def flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten nested mappings into dotted keys.

    Scalars are converted to strings; None values are dropped so that they
    read as absent.
    """
    result: Dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            result.update(flatten(value, full_key))
        elif value is not None:
            result[full_key] = str(value)
    return result


def load_yaml_file(path: Union[str, Path]) -> Dict[str, str]:
    """
    Load a YAML configuration file into flattened dotted keys.

    Returns:
        The flattened configuration, empty if the file does not exist

    Raises:
        ConfigurationError: If the file cannot be read or is not a YAML mapping
    """
    path = Path(path)
    if not path.is_file():
        logger.debug(f"Configuration file not found, skipping: {path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error reading configuration file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {path} must contain a mapping, got {type(data).__name__}"
        )

    logger.debug(f"Loaded configuration file: {path}")
    return flatten(data)


class ConfigurationSource:
    """Read-only view over overrides, environment variables and YAML files."""

    def __init__(
        self,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
        config_files: Optional[Sequence[Union[str, Path]]] = None,
    ):
        """
        Initialize the configuration source.

        Args:
            overrides: Values taking precedence over everything else
            environ: Environment mapping, defaults to ``os.environ``
            config_files: YAML files to read; defaults to the files listed in
                MODULITH_CONFIG_LOCATION or application.yaml/yml in the
                working directory. Later files win over earlier ones.
        """
        self._overrides = flatten(overrides or {})
        self._environ = os.environ if environ is None else environ
        self._config_files = (
            [Path(f) for f in config_files]
            if config_files is not None
            else self._default_config_files()
        )
        self._file_values: Optional[Dict[str, str]] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ConfigurationSource":
        """Create a source backed by ``values`` only, ignoring environment and files."""
        return cls(values, environ={}, config_files=[])

    def get(self, key: str) -> Optional[str]:
        """
        Look up a configuration value.

        Returns:
            The value as a string or None if it is not configured anywhere
        """
        if key in self._overrides:
            return self._overrides[key]

        for name in (env_var_name(key), key):
            if name in self._environ:
                logger.debug(f"Configuration {key} taken from environment variable {name}")
                return self._environ[name]

        return self._load_files().get(key)

    @property
    def config_files(self) -> List[Path]:
        return list(self._config_files)

    def _load_files(self) -> Dict[str, str]:
        if self._file_values is None:
            values: Dict[str, str] = {}
            for path in self._config_files:
                values.update(load_yaml_file(path))
            self._file_values = values
        return self._file_values

    def _default_config_files(self) -> List[Path]:
        location = self._environ.get(CONFIG_LOCATION_ENV_VAR, "")
        if location.strip():
            return [Path(part.strip()) for part in location.split(",") if part.strip()]
        return [Path.cwd() / name for name in DEFAULT_CONFIG_FILES]

    def __repr__(self) -> str:
        files = ", ".join(str(f) for f in self._config_files)
        return f"ConfigurationSource(overrides={sorted(self._overrides)}, files=[{files}])"
