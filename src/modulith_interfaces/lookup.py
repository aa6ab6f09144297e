"""
Lookup of the named interfaces detection strategy to use when scanning modules.

The strategy is selected by the ``modulith.named-interfaces-detection-strategy``
configuration property:

1. Nothing configured (absent or blank): the explicitly annotated strategy.
2. ``explicitly-annotated``: the explicitly annotated strategy.
3. The name of a strategy registered in the ``DetectionStrategyRegistry``.
4. Anything else is interpreted as a fully-qualified class reference
   (``package.module.ClassName`` or ``package.module:ClassName``) that is
   imported and instantiated without arguments.

A configured class that cannot be imported or instantiated raises a
``StrategyConfigurationError``; there is no fallback to the default strategy.
"""

import importlib
import logging
from typing import Any, NoReturn, Optional, Protocol, Type

from .config import DETECTION_STRATEGY_PROPERTY, ConfigurationSource
from .detection import EXPLICITLY_ANNOTATED, NamedInterfacesDetectionStrategy, explicitly_annotated
from .exceptions import StrategyConfigurationError
from .registry import DetectionStrategyRegistry

logger = logging.getLogger(__name__)

FALLBACK_DETECTION_STRATEGY = explicitly_annotated


class ConfigurationLookup(Protocol):
    def get(self, key: str) -> Optional[str]: ...


def get_strategy(
    configuration: Optional[ConfigurationLookup] = None,
    registry: Type[DetectionStrategyRegistry] = DetectionStrategyRegistry,
) -> NamedInterfacesDetectionStrategy:
    """
    Return the detection strategy selected by configuration.

    Every call reads the configuration again and creates a new strategy
    instance. Callers wanting a shared instance have to keep it themselves.

    Args:
        configuration: Key-value lookup providing the configured value;
            defaults to a ConfigurationSource over the environment and
            application.yaml
        registry: Registry consulted for host-registered strategy names

    Returns:
        The strategy, never None

    Raises:
        StrategyConfigurationError: If the configured value names a class that
            cannot be imported, instantiated or is not a detection strategy
    """
    if configuration is None:
        configuration = ConfigurationSource()

    configured_strategy = configuration.get(DETECTION_STRATEGY_PROPERTY)

    # Nothing configured? Use fallback.
    if configured_strategy is None or not str(configured_strategy).strip():
        logger.debug("No detection strategy configured, using fallback")
        return FALLBACK_DETECTION_STRATEGY()

    configured_strategy = str(configured_strategy)

    if configured_strategy == EXPLICITLY_ANNOTATED:
        logger.debug(f"Using built-in detection strategy '{EXPLICITLY_ANNOTATED}'")
        return explicitly_annotated()

    factory = registry.get(configured_strategy)
    if factory is not None:
        logger.debug(f"Using registered detection strategy '{configured_strategy}'")
        return _create(configured_strategy, factory)

    strategy_type = _load_strategy_type(configured_strategy)
    strategy = _create(configured_strategy, strategy_type)
    logger.debug(f"Using custom detection strategy {configured_strategy}")
    return strategy


class StrategyLookup:
    """Holds a configuration source and registry to resolve the strategy from."""

    def __init__(
        self,
        configuration: Optional[ConfigurationLookup] = None,
        registry: Type[DetectionStrategyRegistry] = DetectionStrategyRegistry,
    ):
        self._configuration = configuration
        self._registry = registry

    def get_strategy(self) -> NamedInterfacesDetectionStrategy:
        return get_strategy(self._configuration, self._registry)


def _load_strategy_type(reference: str) -> type:
    try:
        target = _import_reference(reference)
    except Exception as e:
        _fail(reference, f"Cannot load detection strategy class '{reference}': {e}", e)

    if not isinstance(target, type):
        error = TypeError(f"'{reference}' is not a class (got {type(target).__name__})")
        _fail(reference, str(error), error)

    if not issubclass(target, NamedInterfacesDetectionStrategy):
        error = TypeError(
            f"{target.__module__}.{target.__qualname__} does not implement "
            f"{NamedInterfacesDetectionStrategy.__name__}"
        )
        _fail(reference, str(error), error)

    return target


def _import_reference(reference: str) -> Any:
    """
    Import the object a dotted or colon separated reference points to.

    ``pkg.mod:Outer.Inner`` names the module explicitly. Without a colon the
    longest importable module prefix is used and the rest is resolved as
    attributes.
    """
    if ":" in reference:
        module_name, _, attribute_path = reference.partition(":")
        return _resolve_attributes(importlib.import_module(module_name), attribute_path)

    parts = reference.split(".")
    if len(parts) < 2 or not all(parts):
        raise ImportError(f"'{reference}' is not a fully-qualified class name")

    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            # Only a missing prefix of the reference itself means "try shorter".
            if e.name and (module_name == e.name or module_name.startswith(f"{e.name}.")):
                continue
            raise
        return _resolve_attributes(module, ".".join(parts[index:]))

    raise ModuleNotFoundError(f"No module found for '{reference}'", name=parts[0])


def _resolve_attributes(module: Any, attribute_path: str) -> Any:
    target = module
    for attribute in attribute_path.split("."):
        target = getattr(target, attribute)
    return target


def _create(reference: str, factory: Any) -> NamedInterfacesDetectionStrategy:
    try:
        strategy = factory()
    except Exception as e:
        _fail(reference, f"Cannot instantiate detection strategy '{reference}': {e}", e)

    if not isinstance(strategy, NamedInterfacesDetectionStrategy):
        error = TypeError(
            f"'{reference}' produced {type(strategy).__name__}, "
            f"not a {NamedInterfacesDetectionStrategy.__name__}"
        )
        _fail(reference, str(error), error)

    return strategy


def _fail(reference: str, message: str, cause: BaseException) -> NoReturn:
    logger.error(message)
    raise StrategyConfigurationError(message, configured_value=reference) from cause
