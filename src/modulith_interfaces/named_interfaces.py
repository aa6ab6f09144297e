"""
Named interfaces of an application module and their discovery.

A named interface is the part of a module's base package that is deliberately
exposed to other modules. Packages opt in by assigning ``__named_interface__``
in their ``__init__.py``, classes by carrying the ``@named_interface``
decorator. Everything directly in the base package that is not marked belongs
to the implicit unnamed interface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, TypeVar

from .packages import ModulePackage, PackageType

logger = logging.getLogger(__name__)

UNNAMED_NAME = "<<UNNAMED>>"

T = TypeVar("T", bound=type)


def named_interface(*names: str) -> Callable[[T], T]:
    """
    Mark a class as part of one or more named interfaces.

    Without names the class is assigned to the interface named after its
    package. Discovery reads the decorator from source, the runtime effect is
    limited to recording the names on the class.

    Example:
        @named_interface("api")
        class OrderPlaced:
            ...
    """

    def decorator(cls: T) -> T:
        setattr(cls, "__named_interfaces__", tuple(names))
        return cls

    return decorator


@dataclass(frozen=True)
class NamedInterface:
    """A named group of types exposed by a module."""

    name: str
    types: Tuple[PackageType, ...] = ()

    @classmethod
    def of(cls, name: str, types: Iterable[PackageType]) -> "NamedInterface":
        return cls(name, tuple(sorted(set(types), key=lambda t: t.qualified_name)))

    @classmethod
    def unnamed(cls, types: Iterable[PackageType]) -> "NamedInterface":
        return cls.of(UNNAMED_NAME, types)

    @property
    def is_unnamed(self) -> bool:
        return self.name == UNNAMED_NAME

    def contains(self, qualified_type_name: str) -> bool:
        return any(t.qualified_name == qualified_type_name for t in self.types)

    def merge(self, other: "NamedInterface") -> "NamedInterface":
        if other.name != self.name:
            raise ValueError(
                f"Cannot merge named interfaces with different names: {self.name}, {other.name}"
            )
        return NamedInterface.of(self.name, self.types + other.types)

    def __iter__(self) -> Iterator[PackageType]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)


class NamedInterfaces:
    """
    The partition of a module's base package into named interfaces.

    Always contains the unnamed interface, which comes first; explicitly named
    interfaces follow in alphabetical order.
    """

    def __init__(self, interfaces: Iterable[NamedInterface] = ()):
        merged: Dict[str, NamedInterface] = {}
        for interface in interfaces:
            existing = merged.get(interface.name)
            merged[interface.name] = existing.merge(interface) if existing else interface

        unnamed = merged.pop(UNNAMED_NAME, NamedInterface.unnamed(()))
        self._interfaces: List[NamedInterface] = [unnamed] + [
            merged[name] for name in sorted(merged)
        ]

    @property
    def unnamed(self) -> NamedInterface:
        return self._interfaces[0]

    def named(self) -> List[NamedInterface]:
        return self._interfaces[1:]

    def names(self) -> List[str]:
        return [interface.name for interface in self._interfaces]

    def get(self, name: str) -> Optional[NamedInterface]:
        for interface in self._interfaces:
            if interface.name == name:
                return interface
        return None

    def contains(self, name: str) -> bool:
        return self.get(name) is not None

    def has_explicit_interfaces(self) -> bool:
        return len(self._interfaces) > 1

    def __iter__(self) -> Iterator[NamedInterface]:
        return iter(self._interfaces)

    def __len__(self) -> int:
        return len(self._interfaces)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamedInterfaces):
            return NotImplemented
        return self._interfaces == other._interfaces

    def __repr__(self) -> str:
        return f"NamedInterfaces({', '.join(self.names())})"


def discover_named_interfaces(base_package: ModulePackage) -> NamedInterfaces:
    """
    Discover the explicitly marked named interfaces below ``base_package``.

    Args:
        base_package: The base package of an application module

    Returns:
        The partition of the package, never None

    Raises:
        PackageScanError: If a module source cannot be parsed or carries a
            malformed marker
    """
    interfaces: List[NamedInterface] = []

    for package in base_package.all_packages():
        package_markers = package.init_module().package_markers()
        package_types = package.types()

        if package_markers is not None:
            for name in package_markers or (package.local_name,):
                logger.debug(f"Package {package} contributes to named interface '{name}'")
                interfaces.append(NamedInterface.of(name, package_types))

        for package_type in package_types:
            if not package_type.is_marked:
                continue
            for name in package_type.markers or (package.local_name,):
                logger.debug(f"Type {package_type} contributes to named interface '{name}'")
                interfaces.append(NamedInterface.of(name, (package_type,)))

    unmarked = [t for t in base_package.types() if not t.is_marked]
    interfaces.append(NamedInterface.unnamed(unmarked))

    result = NamedInterfaces(interfaces)
    logger.debug(f"Discovered {result!r} in {base_package}")
    return result
