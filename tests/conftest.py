"""
Global test configuration and fixtures for the modulith_interfaces test suite.

This module provides:
- Fixtures that write throwaway package trees for scanning
- Isolation of the process environment and the strategy registry
- Pytest collection hooks for automatic test categorization based on location
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable, Dict

import pytest

# Add src and the repository root to path for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

from modulith_interfaces.config import CONFIG_LOCATION_ENV_VAR, DETECTION_STRATEGY_PROPERTY, env_var_name
from modulith_interfaces.registry import DetectionStrategyRegistry


# ============================================================================
# PYTEST CONFIGURATION AND HOOKS
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "fast: marks tests as fast-running tests")


def pytest_collection_modifyitems(config, items):
    """Automatically add markers to tests based on their directory."""
    tests_root = Path(__file__).parent

    for item in items:
        try:
            parts = Path(item.fspath).relative_to(tests_root).parts
        except ValueError:
            parts = Path(item.fspath).parts

        if "unit" in parts:
            item.add_marker(pytest.mark.unit)
            item.add_marker(pytest.mark.fast)
        elif "integration" in parts:
            item.add_marker(pytest.mark.integration)


# ============================================================================
# ISOLATION FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch, tmp_path):
    """Run every test without ambient strategy configuration."""
    monkeypatch.delenv(env_var_name(DETECTION_STRATEGY_PROPERTY), raising=False)
    monkeypatch.delenv(DETECTION_STRATEGY_PROPERTY, raising=False)
    monkeypatch.delenv(CONFIG_LOCATION_ENV_VAR, raising=False)
    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture(autouse=True)
def clean_registry():
    """Drop host registrations before and after each test."""
    DetectionStrategyRegistry.clear()
    yield
    DetectionStrategyRegistry.clear()


# ============================================================================
# PACKAGE TREE FIXTURES
# ============================================================================


@pytest.fixture
def write_package(tmp_path) -> Callable[[str, Dict[str, str]], Path]:
    """
    Return a helper writing a package tree below ``tmp_path``.

    The helper takes the package directory name and a mapping of relative file
    paths to source text. Every directory on the way gets an ``__init__.py``
    unless the mapping provides one.
    """

    def _write(name: str, files: Dict[str, str]) -> Path:
        root = tmp_path / "packages" / name
        root.mkdir(parents=True)
        (root / "__init__.py").touch()

        for relative, source in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            directory = target.parent
            while directory != root:
                init = directory / "__init__.py"
                if not init.exists():
                    init.touch()
                directory = directory.parent
            target.write_text(textwrap.dedent(source), encoding="utf-8")

        return root

    return _write


@pytest.fixture
def shop_package(write_package) -> Path:
    """A module with one explicitly marked ``orders`` sub-package."""
    return write_package(
        "shop",
        {
            "__init__.py": "",
            "service.py": """
                class ShopService:
                    pass

                class _Helper:
                    pass
            """,
            "orders/__init__.py": """
                __named_interface__ = "orders"
            """,
            "orders/events.py": """
                class OrderPlaced:
                    pass
            """,
            "internal/repository.py": """
                class ShopRepository:
                    pass
            """,
        },
    )


@pytest.fixture
def configured_environment(monkeypatch) -> Callable[[str], None]:
    """Return a helper setting the strategy through the environment."""

    def _configure(value: str) -> None:
        monkeypatch.setenv(env_var_name(DETECTION_STRATEGY_PROPERTY), value)

    return _configure
