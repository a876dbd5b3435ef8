"""Registry mapping provider identifiers to cluster drivers."""

from kubeorch.core.config import KubeorchConfig
from kubeorch.interfaces.cluster_driver import ClusterDriver
from kubeorch.utils.logging import get_logger

logger = get_logger(__name__)


class DriverRegistry:
    """Lookup table of cluster drivers keyed by provider id.

    Adding a provider means registering a driver; the orchestrator never
    branches on provider names.
    """

    def __init__(self) -> None:
        """Initialize driver registry."""
        self._drivers: dict[str, ClusterDriver] = {}
        logger.debug("driver_registry_initialized")

    def register(self, driver: ClusterDriver, replace: bool = False) -> None:
        """Register a driver under its provider id.

        Args:
            driver: Driver to register
            replace: Overwrite an existing registration
        """
        if driver.provider in self._drivers and not replace:
            logger.warning("driver_already_registered", provider=driver.provider)
            return

        self._drivers[driver.provider] = driver
        logger.debug("driver_registered", provider=driver.provider)

    def unregister(self, provider: str) -> bool:
        """Unregister a driver.

        Args:
            provider: Provider id

        Returns:
            True if a driver was found and removed
        """
        if provider not in self._drivers:
            logger.warning("driver_not_found_for_unregister", provider=provider)
            return False

        del self._drivers[provider]
        logger.debug("driver_unregistered", provider=provider)
        return True

    def get(self, provider: str) -> ClusterDriver | None:
        """Get the driver for a provider, or None."""
        return self._drivers.get(provider)

    def providers(self) -> list[str]:
        """Registered provider ids, sorted."""
        return sorted(self._drivers)

    def __contains__(self, provider: object) -> bool:
        return provider in self._drivers

    def __len__(self) -> int:
        """Get number of registered drivers."""
        return len(self._drivers)


def default_registry(config: KubeorchConfig | None = None) -> DriverRegistry:
    """Build a registry with the EKS and GKE drivers and stubs for azure and ncp."""
    from kubeorch.drivers.eks_driver import EKSDriver
    from kubeorch.drivers.gke_driver import GKEDriver
    from kubeorch.drivers.unimplemented import UnimplementedDriver

    registry = DriverRegistry()
    registry.register(EKSDriver(config))
    registry.register(GKEDriver(config))
    registry.register(UnimplementedDriver("azure"))
    registry.register(UnimplementedDriver("ncp"))
    return registry
