"""Module whose import fails because of a missing dependency."""

import modulith_interfaces_missing_dependency  # noqa: F401

from modulith_interfaces.detection import NamedInterfacesDetectionStrategy


class BrokenStrategy(NamedInterfacesDetectionStrategy):
    def get_module_named_interfaces(self, module_base_package):
        raise NotImplementedError
