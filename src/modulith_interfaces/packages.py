"""
Descriptors for Python packages that make up application modules.

A ``ModulePackage`` points at a package directory on disk. Its contents are
inspected by parsing the module sources with :mod:`ast`, so scanning a package
never imports it and never executes any of its code.
"""

from __future__ import annotations

import ast
import importlib.machinery
import importlib.util
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .exceptions import PackageNotFoundError, PackageScanError

logger = logging.getLogger(__name__)

PACKAGE_MARKER_ATTRIBUTE = "__named_interface__"
TYPE_MARKER_DECORATOR = "named_interface"

INIT_MODULE = "__init__.py"


@dataclass(frozen=True)
class PackageType:
    """A public top-level class declared in a module of a package."""

    module: str
    name: str
    # None means the class carries no marker, an empty tuple means a marker
    # without explicit names.
    markers: Optional[Tuple[str, ...]] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"

    @property
    def is_marked(self) -> bool:
        return self.markers is not None

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class ModuleSource:
    """A single ``.py`` file belonging to a package."""

    name: str
    path: Path

    @property
    def is_package_init(self) -> bool:
        return self.path.name == INIT_MODULE

    def parse(self) -> ast.Module:
        try:
            source = self.path.read_text(encoding="utf-8")
            return ast.parse(source, filename=str(self.path))
        except SyntaxError as e:
            raise PackageScanError(self.path, f"invalid syntax at line {e.lineno}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise PackageScanError(self.path, str(e)) from e

    def types(self) -> List[PackageType]:
        """Return the public classes declared at module level."""
        result = []
        for node in self.parse().body:
            if not isinstance(node, ast.ClassDef) or node.name.startswith("_"):
                continue
            result.append(PackageType(self.name, node.name, self._type_markers(node)))
        return sorted(result, key=lambda t: t.qualified_name)

    def package_markers(self) -> Optional[Tuple[str, ...]]:
        """
        Return the names assigned to ``__named_interface__`` in this module.

        Returns:
            None if the module carries no package marker, otherwise the declared
            names (an empty tuple when the package's own name is to be used).
        """
        for node in self.parse().body:
            if isinstance(node, ast.Assign):
                targets = node.targets
            elif isinstance(node, ast.AnnAssign) and node.value is not None:
                targets = [node.target]
            else:
                continue
            if any(isinstance(t, ast.Name) and t.id == PACKAGE_MARKER_ATTRIBUTE for t in targets):
                return self._literal_names(node.value, PACKAGE_MARKER_ATTRIBUTE)
        return None

    def _type_markers(self, node: ast.ClassDef) -> Optional[Tuple[str, ...]]:
        for decorator in node.decorator_list:
            target = decorator.func if isinstance(decorator, ast.Call) else decorator
            if _terminal_name(target) != TYPE_MARKER_DECORATOR:
                continue
            if not isinstance(decorator, ast.Call):
                return ()
            names: List[str] = []
            for arg in decorator.args:
                names.extend(self._literal_names(arg, f"@{TYPE_MARKER_DECORATOR} on {node.name}"))
            return tuple(names)
        return None

    def _literal_names(self, value: ast.expr, where: str) -> Tuple[str, ...]:
        # A single blank string stands for the package's own name, blank
        # entries in a list are errors.
        if isinstance(value, ast.Constant) and isinstance(value.value, str):
            return (value.value,) if value.value.strip() else ()
        if isinstance(value, (ast.List, ast.Tuple)):
            names = []
            for element in value.elts:
                if not (isinstance(element, ast.Constant) and isinstance(element.value, str)):
                    break
                if not element.value.strip():
                    raise PackageScanError(self.path, f"{where} contains a blank name")
                names.append(element.value)
            else:
                return tuple(names)
        raise PackageScanError(self.path, f"{where} must be a string literal or a list of them")


def _terminal_name(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


@dataclass(frozen=True)
class ModulePackage:
    """
    The base package of an application module, or one of its sub-packages.

    Instances are immutable; scanning reads the files below ``path`` but never
    changes the descriptor.
    """

    name: str
    path: Path

    @classmethod
    def of(cls, path: Union[str, Path], name: Optional[str] = None) -> "ModulePackage":
        """
        Create a descriptor for the package directory at ``path``.

        Args:
            path: Directory containing an ``__init__.py``
            name: Dotted package name, defaults to the directory name

        Raises:
            PackageNotFoundError: If ``path`` is not a package directory
        """
        directory = Path(path).resolve()
        if not (directory / INIT_MODULE).is_file():
            raise PackageNotFoundError(f"Not a Python package directory: {directory}")
        return cls(name or directory.name, directory)

    @classmethod
    def from_import_name(cls, dotted_name: str) -> "ModulePackage":
        """
        Locate an importable package by its dotted name without importing it.

        Only the top-level name goes through the import system's finders.
        Nested packages are searched for in their parent's directories, so no
        ``__init__.py`` on the way is executed.

        Raises:
            PackageNotFoundError: If the name does not resolve to a package
                directory
        """
        segments = dotted_name.split(".")
        if not all(segments):
            raise PackageNotFoundError(f"'{dotted_name}' is not a valid package name")

        search_locations: Optional[List[str]] = None
        for index in range(len(segments)):
            qualified = ".".join(segments[: index + 1])
            try:
                if search_locations is None:
                    spec = importlib.util.find_spec(qualified)
                else:
                    spec = importlib.machinery.PathFinder.find_spec(qualified, search_locations)
            except (ImportError, ValueError) as e:
                raise PackageNotFoundError(f"Cannot locate package '{dotted_name}': {e}") from e

            if spec is None or not spec.submodule_search_locations:
                raise PackageNotFoundError(f"'{dotted_name}' is not an importable package")
            search_locations = list(spec.submodule_search_locations)

        location = Path(search_locations[0])
        logger.debug(f"Located package {dotted_name} at {location}")
        return cls.of(location, dotted_name)

    @property
    def local_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def modules(self) -> List[ModuleSource]:
        result = []
        for file in sorted(self.path.glob("*.py")):
            if file.name == INIT_MODULE:
                result.append(ModuleSource(self.name, file))
            else:
                result.append(ModuleSource(f"{self.name}.{file.stem}", file))
        return result

    def init_module(self) -> ModuleSource:
        return ModuleSource(self.name, self.path / INIT_MODULE)

    def sub_packages(self) -> List["ModulePackage"]:
        return [
            ModulePackage(f"{self.name}.{child.name}", child)
            for child in sorted(self.path.iterdir())
            if child.is_dir() and (child / INIT_MODULE).is_file()
        ]

    def all_packages(self) -> Iterator["ModulePackage"]:
        """Yield this package and every nested package, depth first."""
        yield self
        for sub_package in self.sub_packages():
            yield from sub_package.all_packages()

    def types(self) -> List[PackageType]:
        """Return the public classes declared directly in this package."""
        result: List[PackageType] = []
        for module in self.modules():
            result.extend(module.types())
        return sorted(result, key=lambda t: t.qualified_name)

    def __str__(self) -> str:
        return self.name
