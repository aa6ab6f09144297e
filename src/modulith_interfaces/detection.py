"""
Strategy interface to customize the detection of named interfaces.

A strategy receives the base package of an application module and returns its
partition into ``NamedInterfaces``. Custom strategies subclass
``NamedInterfacesDetectionStrategy``; plain functions can be adapted with
``FunctionDetectionStrategy``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable

from .named_interfaces import NamedInterfaces, discover_named_interfaces
from .packages import ModulePackage

logger = logging.getLogger(__name__)

EXPLICITLY_ANNOTATED = "explicitly-annotated"

DetectionFunction = Callable[[ModulePackage], NamedInterfaces]


class NamedInterfacesDetectionStrategy(ABC):
    """Interface for detecting the named interfaces of an application module."""

    @abstractmethod
    def get_module_named_interfaces(self, module_base_package: ModulePackage) -> NamedInterfaces:
        """
        Return the named interfaces of the module rooted at the given package.

        Args:
            module_base_package: Base package of the module, never None.
                Implementations must not modify it.

        Returns:
            The named interfaces, never None
        """
        pass


class FunctionDetectionStrategy(NamedInterfacesDetectionStrategy):
    """Adapts a plain function to the detection strategy interface."""

    def __init__(self, function: DetectionFunction):
        if not callable(function):
            raise TypeError(f"Detection function must be callable, got {type(function).__name__}")
        self._function = function

    def get_module_named_interfaces(self, module_base_package: ModulePackage) -> NamedInterfaces:
        result = self._function(module_base_package)
        if not isinstance(result, NamedInterfaces):
            name = getattr(self._function, "__qualname__", repr(self._function))
            raise TypeError(
                f"Detection function {name} returned {type(result).__name__}, "
                "expected NamedInterfaces"
            )
        return result

    def __repr__(self) -> str:
        name = getattr(self._function, "__qualname__", repr(self._function))
        return f"FunctionDetectionStrategy({name})"


class ExplicitlyAnnotatedDetectionStrategy(NamedInterfacesDetectionStrategy):
    """Considers packages and classes explicitly marked as named interfaces."""

    def get_module_named_interfaces(self, module_base_package: ModulePackage) -> NamedInterfaces:
        return discover_named_interfaces(module_base_package)

    def __repr__(self) -> str:
        return "ExplicitlyAnnotatedDetectionStrategy()"


def explicitly_annotated() -> NamedInterfacesDetectionStrategy:
    """Create the strategy that only considers explicitly marked packages and classes."""
    return ExplicitlyAnnotatedDetectionStrategy()
