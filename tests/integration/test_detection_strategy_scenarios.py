"""
End-to-end scenarios: configuration is read from the environment or an
application.yaml in the working directory, the strategy is resolved and run
against a package tree on disk.
"""

import threading

import pytest

from modulith_interfaces import (
    DETECTION_STRATEGY_PROPERTY,
    ModulePackage,
    StrategyConfigurationError,
    explicitly_annotated,
    get_strategy,
    register_detection_strategy,
)
from modulith_interfaces.named_interfaces import UNNAMED_NAME, NamedInterface, NamedInterfaces


class TestUnconfigured:
    def test_orders_scenario(self, shop_package):
        strategy = get_strategy()

        result = strategy.get_module_named_interfaces(ModulePackage.of(shop_package))

        assert result.names() == [UNNAMED_NAME, "orders"]
        assert [t.qualified_name for t in result.get("orders")] == ["shop.orders.events.OrderPlaced"]
        assert result.unnamed.contains("shop.service.ShopService")

    def test_matches_builtin_factory(self, shop_package):
        package = ModulePackage.of(shop_package)

        assert get_strategy().get_module_named_interfaces(
            package
        ) == explicitly_annotated().get_module_named_interfaces(package)


class TestApplicationYaml:
    def test_custom_strategy_from_working_directory(self, shop_package, isolated_configuration):
        (isolated_configuration / "application.yaml").write_text(
            "modulith:\n"
            "  named-interfaces-detection-strategy: "
            "tests.fixtures.detection_strategies.DirectSubPackagesStrategy\n"
        )

        result = get_strategy().get_module_named_interfaces(ModulePackage.of(shop_package))

        assert result.names() == [UNNAMED_NAME, "internal", "orders"]

    def test_environment_wins_over_file(self, shop_package, isolated_configuration, configured_environment):
        (isolated_configuration / "application.yaml").write_text(
            f"{DETECTION_STRATEGY_PROPERTY}: com.example.NonExistentStrategy\n"
        )
        configured_environment("explicitly-annotated")

        result = get_strategy().get_module_named_interfaces(ModulePackage.of(shop_package))

        assert result.names() == [UNNAMED_NAME, "orders"]

    def test_misconfigured_file_never_falls_back(self, isolated_configuration):
        (isolated_configuration / "application.yaml").write_text(
            f"{DETECTION_STRATEGY_PROPERTY}: com.example.NonExistentStrategy\n"
        )

        with pytest.raises(StrategyConfigurationError):
            get_strategy()


class TestHostRegisteredStrategy:
    def test_registered_function_selected_by_environment(self, shop_package, configured_environment):
        @register_detection_strategy("everything-public")
        def everything_public(module_base_package):
            types = [t for p in module_base_package.all_packages() for t in p.types()]
            return NamedInterfaces([NamedInterface.of("public", types)])

        configured_environment("everything-public")

        result = get_strategy().get_module_named_interfaces(ModulePackage.of(shop_package))

        assert len(result.get("public")) == 3


def test_concurrent_lookups_construct_independent_instances(configured_environment):
    configured_environment("tests.fixtures.detection_strategies.DirectSubPackagesStrategy")
    results = []
    lock = threading.Lock()

    def resolve():
        strategy = get_strategy()
        with lock:
            results.append(strategy)

    threads = [threading.Thread(target=resolve) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8
    assert len({id(strategy) for strategy in results}) == 8
