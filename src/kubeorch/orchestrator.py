"""Cluster lifecycle orchestrator.

Single entry point for every cluster and node group operation. For each call
it resolves the driver, decrypts the credential, runs the driver under the
configured timeout and returns the normalized result.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel

from kubeorch.core.config import KubeorchConfig
from kubeorch.core.exceptions import (
    DecryptionFailedError,
    InvalidCredentialError,
    KubeorchError,
    ProviderAPIError,
    UnsupportedOperationError,
    UnsupportedProviderError,
)
from kubeorch.core.models import (
    ClusterInfo,
    ClusterRef,
    ClusterSpec,
    Credential,
    DeleteResult,
    KubeconfigResult,
    ListClustersRequest,
    ListNodeGroupsRequest,
    NodeGroupInfo,
    NodeGroupRef,
    NodeGroupSpec,
    Operation,
)
from kubeorch.drivers.registry import DriverRegistry, default_registry
from kubeorch.interfaces.cluster_driver import ClusterDriver
from kubeorch.interfaces.credential_resolver import CredentialResolver
from kubeorch.interfaces.provider_metadata import ProviderMetadata
from kubeorch.utils.logging import get_logger, log_error, log_operation

logger = get_logger(__name__)

# Operation -> (driver method, request model)
_DISPATCH: dict[Operation, tuple[str, type[BaseModel]]] = {
    Operation.CREATE_CLUSTER: ("create_cluster", ClusterSpec),
    Operation.LIST_CLUSTERS: ("list_clusters", ListClustersRequest),
    Operation.GET_CLUSTER: ("get_cluster", ClusterRef),
    Operation.DELETE_CLUSTER: ("delete_cluster", ClusterRef),
    Operation.GET_KUBECONFIG: ("get_kubeconfig", ClusterRef),
    Operation.CREATE_NODE_GROUP: ("create_node_group", NodeGroupSpec),
    Operation.LIST_NODE_GROUPS: ("list_node_groups", ListNodeGroupsRequest),
    Operation.GET_NODE_GROUP: ("get_node_group", NodeGroupRef),
    Operation.DELETE_NODE_GROUP: ("delete_node_group", NodeGroupRef),
}


class ClusterOrchestrator:
    """Dispatches cluster operations to provider drivers.

    Ordering per call:
    - Unknown provider fails before the credential is touched
    - Unsupported operation fails before the credential is touched
    - Decryption failure fails the call and nothing else
    - The driver runs bounded by ``timeouts.operation_seconds``

    Decrypted credential material is passed to the driver and dropped when the
    call returns. Nothing is cached between calls.
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        registry: DriverRegistry | None = None,
        config: KubeorchConfig | None = None,
    ):
        """Initialize orchestrator.

        Args:
            resolver: Credential resolver used to decrypt credential blobs
            registry: Driver registry (defaults to EKS, GKE and stub drivers)
            config: kubeorch configuration
        """
        self.config = config or KubeorchConfig()
        self.resolver = resolver
        self.registry = registry or default_registry(self.config)
        logger.debug("cluster_orchestrator_initialized", providers=self.registry.providers())

    def resolve_driver(self, provider: str, operation: Operation) -> ClusterDriver:
        """Find the driver for a provider and check it supports an operation.

        Raises:
            UnsupportedProviderError: If no driver is registered
            UnsupportedOperationError: If the driver does not implement the operation
        """
        driver = self.registry.get(provider)
        if driver is None:
            raise UnsupportedProviderError(provider)
        if operation not in driver.supported_operations:
            raise UnsupportedOperationError(provider, operation.value)
        return driver

    async def _decrypt(self, provider: str, credential: Credential) -> dict[str, Any]:
        if credential.provider != provider:
            raise InvalidCredentialError(
                provider,
                message=f"credential is for provider {credential.provider!r}, not {provider!r}",
            )
        try:
            return await self.resolver.decrypt(credential.encrypted_data)
        except DecryptionFailedError:
            raise
        except Exception as e:
            raise DecryptionFailedError(f"failed to decrypt {provider} credential: {e}") from e

    async def execute(
        self,
        operation: Operation | str,
        provider: str,
        credential: Credential,
        request: BaseModel,
    ) -> Any:
        """Execute one operation against one provider.

        Args:
            operation: Operation to perform
            provider: Provider identifier (e.g. ``aws``, ``gcp``)
            credential: Encrypted credential for the provider
            request: Request model matching the operation

        Returns:
            The normalized result for the operation

        Raises:
            UnsupportedProviderError: If the provider has no driver
            UnsupportedOperationError: If the driver does not implement the operation
            DecryptionFailedError: If the credential cannot be decrypted
            ProviderAPIError: If the provider call fails or times out
        """
        operation = Operation(operation)
        method_name, request_type = _DISPATCH[operation]
        if not isinstance(request, request_type):
            raise TypeError(
                f"{operation.value} expects {request_type.__name__}, got {type(request).__name__}"
            )

        driver = self.resolve_driver(provider, operation)
        method = getattr(driver, method_name)
        return await self._call_driver(
            provider,
            operation.value,
            credential,
            lambda credentials: method(credentials, request),
        )

    async def _call_driver(
        self,
        provider: str,
        operation: str,
        credential: Credential,
        call: Callable[[dict[str, Any]], Awaitable[Any]],
    ) -> Any:
        credentials = await self._decrypt(provider, credential)

        timeout = self.config.timeouts.operation_seconds
        log_operation(logger, "started", operation=operation, provider=provider)

        try:
            result = await asyncio.wait_for(call(credentials), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error(
                "operation_timeout", operation=operation, provider=provider, timeout=timeout
            )
            raise ProviderAPIError(
                f"operation timed out after {timeout} seconds",
                provider=provider,
                operation=operation,
                error_code="Timeout",
            ) from e
        except KubeorchError as e:
            log_error(logger, e, operation=operation, provider=provider)
            raise
        finally:
            del credentials

        log_operation(logger, "completed", operation=operation, provider=provider)
        return result

    def resolve_metadata(self, provider: str, query: str) -> ProviderMetadata:
        """Find the driver for a provider and check it answers catalogue queries.

        Raises:
            UnsupportedProviderError: If no driver is registered
            UnsupportedOperationError: If the driver has no catalogue
        """
        driver = self.registry.get(provider)
        if driver is None:
            raise UnsupportedProviderError(provider)
        if not isinstance(driver, ProviderMetadata):
            raise UnsupportedOperationError(provider, query)
        return driver

    async def list_versions(self, provider: str, credential: Credential, region: str) -> list[str]:
        """List Kubernetes versions a provider offers in a region."""
        driver = self.resolve_metadata(provider, "list_versions")
        return await self._call_driver(
            provider,
            "list_versions",
            credential,
            lambda credentials: driver.list_versions(credentials, region),
        )

    async def list_regions(self, provider: str, credential: Credential) -> list[str]:
        """List regions enabled for the credential's account."""
        driver = self.resolve_metadata(provider, "list_regions")
        return await self._call_driver(provider, "list_regions", credential, driver.list_regions)

    async def list_availability_zones(
        self, provider: str, credential: Credential, region: str
    ) -> list[str]:
        """List available zones in a region."""
        driver = self.resolve_metadata(provider, "list_availability_zones")
        return await self._call_driver(
            provider,
            "list_availability_zones",
            credential,
            lambda credentials: driver.list_availability_zones(credentials, region),
        )

    async def create_cluster(
        self, provider: str, credential: Credential, spec: ClusterSpec
    ) -> ClusterInfo:
        """Create a cluster. See ``ClusterDriver.create_cluster``."""
        return await self.execute(Operation.CREATE_CLUSTER, provider, credential, spec)

    async def list_clusters(
        self, provider: str, credential: Credential, region: str
    ) -> list[ClusterInfo]:
        """List clusters in a region."""
        return await self.execute(
            Operation.LIST_CLUSTERS, provider, credential, ListClustersRequest(region=region)
        )

    async def get_cluster(
        self, provider: str, credential: Credential, name: str, region: str
    ) -> ClusterInfo:
        """Get a cluster by name."""
        return await self.execute(
            Operation.GET_CLUSTER, provider, credential, ClusterRef(name=name, region=region)
        )

    async def delete_cluster(
        self, provider: str, credential: Credential, name: str, region: str
    ) -> DeleteResult:
        """Delete a cluster."""
        return await self.execute(
            Operation.DELETE_CLUSTER, provider, credential, ClusterRef(name=name, region=region)
        )

    async def get_kubeconfig(
        self, provider: str, credential: Credential, name: str, region: str
    ) -> KubeconfigResult:
        """Render a kubeconfig for a cluster."""
        return await self.execute(
            Operation.GET_KUBECONFIG, provider, credential, ClusterRef(name=name, region=region)
        )

    async def create_node_group(
        self, provider: str, credential: Credential, spec: NodeGroupSpec
    ) -> NodeGroupInfo:
        """Create a node group."""
        return await self.execute(Operation.CREATE_NODE_GROUP, provider, credential, spec)

    async def list_node_groups(
        self, provider: str, credential: Credential, cluster_name: str, region: str
    ) -> list[NodeGroupInfo]:
        """List node groups of a cluster."""
        return await self.execute(
            Operation.LIST_NODE_GROUPS,
            provider,
            credential,
            ListNodeGroupsRequest(cluster_name=cluster_name, region=region),
        )

    async def get_node_group(
        self, provider: str, credential: Credential, cluster_name: str, name: str, region: str
    ) -> NodeGroupInfo:
        """Get a node group."""
        return await self.execute(
            Operation.GET_NODE_GROUP,
            provider,
            credential,
            NodeGroupRef(cluster_name=cluster_name, name=name, region=region),
        )

    async def delete_node_group(
        self, provider: str, credential: Credential, cluster_name: str, name: str, region: str
    ) -> DeleteResult:
        """Delete a node group."""
        return await self.execute(
            Operation.DELETE_NODE_GROUP,
            provider,
            credential,
            NodeGroupRef(cluster_name=cluster_name, name=name, region=region),
        )
