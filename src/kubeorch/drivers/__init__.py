"""Provider cluster drivers."""

from kubeorch.drivers.registry import DriverRegistry, default_registry
from kubeorch.drivers.unimplemented import UnimplementedDriver

__all__ = [
    "DriverRegistry",
    "UnimplementedDriver",
    "default_registry",
]
