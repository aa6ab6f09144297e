"""Exceptions raised while configuring and scanning module packages."""

from pathlib import Path
from typing import Optional, Union


class ConfigurationError(Exception):
    """Custom exception for configuration errors."""

    pass


class StrategyConfigurationError(ConfigurationError):
    """
    The configured detection strategy cannot be turned into a usable instance.

    Raised for unresolvable type references as well as for types that cannot be
    constructed without arguments or do not implement the detection strategy.
    The original failure is always chained as ``__cause__``.
    """

    def __init__(self, message: str, configured_value: Optional[str] = None):
        super().__init__(message)
        self.configured_value = configured_value


class PackageNotFoundError(ValueError):
    """The given name or path does not denote a Python package."""

    pass


class PackageScanError(Exception):
    """A module inside a scanned package could not be parsed."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Cannot scan {path}: {reason}")
        self.path = Path(path)
        self.reason = reason
