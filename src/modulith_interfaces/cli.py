"""
Command-line tool to inspect the named interfaces of an application module.

Resolves the configured detection strategy, runs it against the given package
and prints the resulting named interfaces.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .config import DETECTION_STRATEGY_PROPERTY, ConfigurationSource
from .exceptions import ConfigurationError, PackageNotFoundError, PackageScanError
from .lookup import get_strategy
from .named_interfaces import NamedInterfaces
from .packages import ModulePackage

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PACKAGE_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modulith-interfaces",
        description="Show the named interfaces of an application module package",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s myapp.orders
  %(prog)s src/myapp/orders --strategy explicitly-annotated
  %(prog)s myapp.orders --config config/application.yaml

The strategy defaults to the {DETECTION_STRATEGY_PROPERTY} configuration property.
        """,
    )
    parser.add_argument("package", help="Dotted package name or path to a package directory")
    parser.add_argument(
        "--strategy",
        "-s",
        help="Detection strategy name or class reference, overrides configuration",
    )
    parser.add_argument(
        "--config",
        "-c",
        action="append",
        help="YAML configuration file (may be given more than once)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: WARNING)",
    )
    return parser


def load_package(target: str) -> ModulePackage:
    """Interpret ``target`` as a directory if it exists, otherwise as an import name."""
    path = Path(target)
    if path.is_dir():
        return ModulePackage.of(path)
    return ModulePackage.from_import_name(target)


def render(named_interfaces: NamedInterfaces, package: ModulePackage, console: Console) -> None:
    table = Table(title=f"Named interfaces of {package.name}")
    table.add_column("Interface", style="cyan", no_wrap=True)
    table.add_column("Types", style="green")

    for interface in named_interfaces:
        label = "(unnamed)" if interface.is_unnamed else interface.name
        types = "\n".join(t.qualified_name for t in interface) or "-"
        table.add_row(label, types)

    console.print(table)


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    console = console or Console()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    overrides = {DETECTION_STRATEGY_PROPERTY: args.strategy} if args.strategy else None
    configuration = ConfigurationSource(overrides, config_files=args.config)

    try:
        strategy = get_strategy(configuration)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return EXIT_CONFIGURATION_ERROR

    try:
        package = load_package(args.package)
        named_interfaces = strategy.get_module_named_interfaces(package)
    except (PackageNotFoundError, PackageScanError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return EXIT_PACKAGE_ERROR

    render(named_interfaces, package, console)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
