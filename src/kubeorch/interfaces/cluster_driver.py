"""Cluster driver interface for managed Kubernetes providers."""

from abc import ABC, abstractmethod
from typing import Any

from kubeorch.core.models import (
    ClusterInfo,
    ClusterRef,
    ClusterSpec,
    DeleteResult,
    KubeconfigResult,
    ListClustersRequest,
    ListNodeGroupsRequest,
    NodeGroupInfo,
    NodeGroupRef,
    NodeGroupSpec,
    Operation,
)

Credentials = dict[str, Any]


class ClusterDriver(ABC):
    """Abstract interface for one provider's cluster lifecycle operations.

    Drivers are stateless: decrypted credentials arrive with each call and
    are not retained. Every provider-native shape is translated to the
    normalized models at this boundary.

    Implementation Note:
    Validation (network, node pool, scaling) must happen before the first
    provider call. SDK exceptions must surface as ProviderAPIError.
    """

    @property
    @abstractmethod
    def provider(self) -> str:
        """Provider identifier this driver handles."""

    @property
    def supported_operations(self) -> frozenset[Operation]:
        """Operations this driver implements."""
        return frozenset(Operation)

    @abstractmethod
    async def create_cluster(self, credentials: Credentials, spec: ClusterSpec) -> ClusterInfo:
        """Create a cluster.

        Args:
            credentials: Decrypted provider credentials
            spec: Cluster specification

        Returns:
            ClusterInfo with status ``creating``

        Raises:
            MissingNetworkConfigError: If the spec has no network block
            MissingNodePoolConfigError: If the provider requires a node pool
            InvalidScalingConfigError: If node pool bounds are inconsistent
            ProviderAPIError: If the provider rejects the request
        """

    @abstractmethod
    async def list_clusters(
        self, credentials: Credentials, request: ListClustersRequest
    ) -> list[ClusterInfo]:
        """List clusters in a region, including zonal ones where applicable.

        Args:
            credentials: Decrypted provider credentials
            request: Region to list

        Returns:
            Clusters found, without duplicates

        Raises:
            ProviderAPIError: If no location could be queried
        """

    @abstractmethod
    async def get_cluster(self, credentials: Credentials, ref: ClusterRef) -> ClusterInfo:
        """Get a cluster by name.

        Args:
            credentials: Decrypted provider credentials
            ref: Cluster name and region

        Returns:
            ClusterInfo

        Raises:
            NotFoundAnyLocationError: If the cluster is at no candidate location
            ProviderAPIError: If the provider call fails
        """

    @abstractmethod
    async def delete_cluster(self, credentials: Credentials, ref: ClusterRef) -> DeleteResult:
        """Delete a cluster.

        Args:
            credentials: Decrypted provider credentials
            ref: Cluster name and region

        Returns:
            DeleteResult with the resolved location

        Raises:
            NotFoundAnyLocationError: If the cluster is at no candidate location
            ProviderAPIError: If the delete call fails
        """

    @abstractmethod
    async def get_kubeconfig(self, credentials: Credentials, ref: ClusterRef) -> KubeconfigResult:
        """Render a kubeconfig for a cluster.

        Args:
            credentials: Decrypted provider credentials
            ref: Cluster name and region

        Returns:
            KubeconfigResult with YAML text

        Raises:
            NotFoundAnyLocationError: If the cluster is at no candidate location
            ProviderAPIError: If the provider call fails
        """

    @abstractmethod
    async def create_node_group(
        self, credentials: Credentials, spec: NodeGroupSpec
    ) -> NodeGroupInfo:
        """Create a node group in an existing cluster.

        Raises:
            InvalidScalingConfigError: If scaling bounds are inconsistent
            ProviderAPIError: If the provider rejects the request
        """

    @abstractmethod
    async def list_node_groups(
        self, credentials: Credentials, request: ListNodeGroupsRequest
    ) -> list[NodeGroupInfo]:
        """List node groups of a cluster."""

    @abstractmethod
    async def get_node_group(self, credentials: Credentials, ref: NodeGroupRef) -> NodeGroupInfo:
        """Get a node group by name."""

    @abstractmethod
    async def delete_node_group(self, credentials: Credentials, ref: NodeGroupRef) -> DeleteResult:
        """Delete a node group."""
