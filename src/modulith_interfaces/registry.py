"""
Registry of named detection strategy factories.

Built-in strategies are registered when this module is imported. Host
applications can register additional factories under their own names before
the strategy is looked up, either via ``DetectionStrategyRegistry.register``
or with the ``register_detection_strategy`` decorator.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Union

from .detection import (
    EXPLICITLY_ANNOTATED,
    DetectionFunction,
    FunctionDetectionStrategy,
    NamedInterfacesDetectionStrategy,
    explicitly_annotated,
)

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[], NamedInterfacesDetectionStrategy]

# Kebab case, so a registered name can never be mistaken for a dotted type reference.
NAMING_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")


class DetectionStrategyRegistry:
    """Registry for zero-argument detection strategy factories."""

    _factories: Dict[str, StrategyFactory] = {}
    _aliases: Dict[str, str] = {}
    _metadata: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def register(
        cls,
        name: str,
        factory: StrategyFactory,
        aliases: Optional[List[str]] = None,
        *,
        force: bool = False,
    ) -> None:
        """
        Register a strategy factory.

        Args:
            name: Unique kebab-case name for the strategy
            factory: Callable without arguments returning a strategy instance,
                usually a NamedInterfacesDetectionStrategy subclass
            aliases: Optional list of alternative names
            force: If True, overwrite an existing host registration or alias.
                Built-in strategies and their names are never replaced.

        Raises:
            ValueError: If the name or an alias is invalid or already taken
        """
        cls._validate_name(name)
        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")

        if cls.is_registered(name):
            existing = cls._aliases.get(name, name)
            if cls._is_builtin(name) or cls._is_builtin(existing):
                raise ValueError(f"Built-in strategy '{name}' cannot be replaced")
            if not force:
                raise ValueError(
                    f"Strategy '{name}' is already registered. Use force=True to overwrite."
                )

        for alias in aliases or []:
            cls._validate_name(alias)
            if alias == name or alias in cls._factories:
                raise ValueError(f"Alias '{alias}' is a strategy name and cannot be used as an alias")
            target = cls._aliases.get(alias)
            if target is not None and cls._is_builtin(target):
                raise ValueError(f"Alias '{alias}' belongs to built-in strategy '{target}'")
            if target is not None and target != name and not force:
                raise ValueError(f"Alias '{alias}' is already in use. Use force=True to overwrite.")

        cls._aliases.pop(name, None)
        cls._factories[name] = factory
        cls._metadata[name] = {"builtin": False}
        for alias in aliases or []:
            cls._aliases[alias] = name
            logger.debug(f"Registered alias: {alias} -> {name}")

        logger.info(f"Registered detection strategy: {name}")

    @classmethod
    def get(cls, name: str) -> Optional[StrategyFactory]:
        """
        Get a registered factory by name or alias.

        Returns:
            The factory or None if not registered
        """
        if name in cls._factories:
            return cls._factories[name]
        if name in cls._aliases:
            return cls._factories.get(cls._aliases[name])
        return None

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._factories or name in cls._aliases

    @classmethod
    def unregister(cls, name: str) -> bool:
        """
        Remove a host-registered strategy and its aliases.

        Returns:
            True if removed, False if it was not registered

        Raises:
            ValueError: If the strategy is a built-in
        """
        if name not in cls._factories:
            logger.warning(f"Detection strategy '{name}' is not registered")
            return False
        if cls._is_builtin(name):
            raise ValueError(f"Built-in strategy '{name}' cannot be unregistered")

        del cls._factories[name]
        cls._metadata.pop(name, None)
        for alias in [a for a, target in cls._aliases.items() if target == name]:
            del cls._aliases[alias]

        logger.info(f"Unregistered detection strategy: {name}")
        return True

    @classmethod
    def list_registered(cls) -> Dict[str, str]:
        """Map registered names to a description of their factory."""
        result = {}
        for name, factory in sorted(cls._factories.items()):
            module = getattr(factory, "__module__", None)
            qualname = getattr(factory, "__qualname__", repr(factory))
            result[name] = f"{module}.{qualname}" if module else qualname
        return result

    @classmethod
    def clear(cls) -> None:
        """Clear host registrations while keeping built-ins."""
        for name in [n for n in cls._factories if not cls._is_builtin(n)]:
            cls.unregister(name)

    @classmethod
    def _is_builtin(cls, name: str) -> bool:
        return bool(cls._metadata.get(name, {}).get("builtin"))

    @staticmethod
    def _validate_name(name: str) -> None:
        if not isinstance(name, str) or not NAMING_PATTERN.match(name):
            raise ValueError(
                f"Invalid strategy name {name!r}: must be kebab case (e.g. 'direct-sub-packages')"
            )


def register_detection_strategy(name: str, aliases: Optional[List[str]] = None):
    """
    Decorator to register a detection strategy under a name.

    Classes are registered as their own factory. Plain functions taking a
    ``ModulePackage`` are wrapped in a ``FunctionDetectionStrategy``.

    Example:
        @register_detection_strategy("direct-sub-packages")
        class DirectSubPackages(NamedInterfacesDetectionStrategy):
            ...
    """

    def decorator(target: Union[type, DetectionFunction]):
        if isinstance(target, type):
            factory: StrategyFactory = target
        else:

            def factory() -> NamedInterfacesDetectionStrategy:
                return FunctionDetectionStrategy(target)

            factory.__qualname__ = getattr(target, "__qualname__", factory.__qualname__)
            factory.__module__ = getattr(target, "__module__", factory.__module__)

        DetectionStrategyRegistry.register(name, factory, aliases=aliases)
        return target

    return decorator


def _register_builtin(name: str, factory: StrategyFactory) -> None:
    DetectionStrategyRegistry._validate_name(name)
    DetectionStrategyRegistry._factories[name] = factory
    DetectionStrategyRegistry._metadata[name] = {"builtin": True}
    logger.debug(f"Registered built-in detection strategy: {name}")


_register_builtin(EXPLICITLY_ANNOTATED, explicitly_annotated)
