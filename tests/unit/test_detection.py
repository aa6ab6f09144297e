"""Tests for the detection strategy abstraction and its built-in variant."""

import pytest

from modulith_interfaces.detection import (
    ExplicitlyAnnotatedDetectionStrategy,
    FunctionDetectionStrategy,
    NamedInterfacesDetectionStrategy,
    explicitly_annotated,
)
from modulith_interfaces.named_interfaces import NamedInterfaces, discover_named_interfaces
from modulith_interfaces.packages import ModulePackage


class TestNamedInterfacesDetectionStrategy:
    def test_is_abstract(self):
        with pytest.raises(TypeError):
            NamedInterfacesDetectionStrategy()

    def test_subclass_implementing_operation(self, shop_package):
        class Empty(NamedInterfacesDetectionStrategy):
            def get_module_named_interfaces(self, module_base_package):
                return NamedInterfaces()

        assert Empty().get_module_named_interfaces(ModulePackage.of(shop_package)) == NamedInterfaces()


class TestExplicitlyAnnotated:
    def test_factory_returns_builtin_strategy(self):
        strategy = explicitly_annotated()

        assert isinstance(strategy, ExplicitlyAnnotatedDetectionStrategy)
        assert isinstance(strategy, NamedInterfacesDetectionStrategy)

    def test_factory_returns_fresh_instances(self):
        assert explicitly_annotated() is not explicitly_annotated()

    def test_delegates_to_discovery(self, shop_package):
        package = ModulePackage.of(shop_package)

        result = explicitly_annotated().get_module_named_interfaces(package)

        assert result == discover_named_interfaces(package)
        assert result.contains("orders")


class TestFunctionDetectionStrategy:
    def test_delegates_to_function(self, shop_package):
        package = ModulePackage.of(shop_package)
        calls = []

        def detect(module_base_package):
            calls.append(module_base_package)
            return NamedInterfaces()

        result = FunctionDetectionStrategy(detect).get_module_named_interfaces(package)

        assert result == NamedInterfaces()
        assert calls == [package]

    def test_rejects_none_result(self, shop_package):
        strategy = FunctionDetectionStrategy(lambda package: None)

        with pytest.raises(TypeError, match="expected NamedInterfaces"):
            strategy.get_module_named_interfaces(ModulePackage.of(shop_package))

    def test_rejects_non_callable(self):
        with pytest.raises(TypeError, match="must be callable"):
            FunctionDetectionStrategy("not callable")

    def test_repr_names_function(self):
        assert "discover_named_interfaces" in repr(
            FunctionDetectionStrategy(discover_named_interfaces)
        )
