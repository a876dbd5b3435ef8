"""Provider catalogue interface."""

from abc import ABC, abstractmethod

from kubeorch.interfaces.cluster_driver import Credentials


class ProviderMetadata(ABC):
    """Read-only catalogue queries a driver can answer.

    These are the lookups a caller needs before writing a cluster spec:
    which Kubernetes versions can be requested, which regions the account
    can use and which zones a region offers.

    Implementation Note:
    Drivers opt in by also subclassing this interface. The orchestrator
    reports UnsupportedOperationError for drivers that do not.
    """

    @abstractmethod
    async def list_versions(self, credentials: Credentials, region: str) -> list[str]:
        """List Kubernetes versions that can be requested, newest first.

        Args:
            credentials: Decrypted credential map
            region: Region to query

        Raises:
            ProviderAPIError: If the provider call fails
        """

    @abstractmethod
    async def list_regions(self, credentials: Credentials) -> list[str]:
        """List regions enabled for the account."""

    @abstractmethod
    async def list_availability_zones(self, credentials: Credentials, region: str) -> list[str]:
        """List zones in a region that are currently available."""
