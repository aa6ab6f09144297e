"""Package initializer for modulith_interfaces.

Exports the detection strategy abstraction, its configuration-driven lookup
and the named interface types it produces.
"""

from .config import DETECTION_STRATEGY_PROPERTY, ConfigurationSource
from .detection import (
    EXPLICITLY_ANNOTATED,
    ExplicitlyAnnotatedDetectionStrategy,
    FunctionDetectionStrategy,
    NamedInterfacesDetectionStrategy,
    explicitly_annotated,
)
from .exceptions import (
    ConfigurationError,
    PackageNotFoundError,
    PackageScanError,
    StrategyConfigurationError,
)
from .lookup import StrategyLookup, get_strategy
from .named_interfaces import (
    NamedInterface,
    NamedInterfaces,
    discover_named_interfaces,
    named_interface,
)
from .packages import ModulePackage, PackageType
from .registry import DetectionStrategyRegistry, register_detection_strategy

__all__ = [
    "DETECTION_STRATEGY_PROPERTY",
    "EXPLICITLY_ANNOTATED",
    "ConfigurationError",
    "ConfigurationSource",
    "DetectionStrategyRegistry",
    "ExplicitlyAnnotatedDetectionStrategy",
    "FunctionDetectionStrategy",
    "ModulePackage",
    "NamedInterface",
    "NamedInterfaces",
    "NamedInterfacesDetectionStrategy",
    "PackageNotFoundError",
    "PackageScanError",
    "PackageType",
    "StrategyConfigurationError",
    "StrategyLookup",
    "discover_named_interfaces",
    "explicitly_annotated",
    "get_strategy",
    "named_interface",
    "register_detection_strategy",
]
