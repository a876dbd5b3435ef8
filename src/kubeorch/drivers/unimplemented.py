"""Placeholder drivers for providers without a backend yet."""

from typing import NoReturn

from kubeorch.core.exceptions import UnsupportedOperationError
from kubeorch.core.models import Operation
from kubeorch.interfaces.cluster_driver import ClusterDriver


class UnimplementedDriver(ClusterDriver):
    """Registered seam for a provider whose backend is not built.

    Every operation raises UnsupportedOperationError. The orchestrator checks
    ``supported_operations`` first, so credentials are never decrypted for
    these providers.
    """

    def __init__(self, provider: str, reason: str = "provider backend not implemented"):
        self._provider = provider
        self.reason = reason

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def supported_operations(self) -> frozenset[Operation]:
        return frozenset()

    def _unsupported(self, operation: Operation) -> NoReturn:
        raise UnsupportedOperationError(self._provider, operation.value, self.reason)

    async def create_cluster(self, credentials, spec):
        self._unsupported(Operation.CREATE_CLUSTER)

    async def list_clusters(self, credentials, request):
        self._unsupported(Operation.LIST_CLUSTERS)

    async def get_cluster(self, credentials, ref):
        self._unsupported(Operation.GET_CLUSTER)

    async def delete_cluster(self, credentials, ref):
        self._unsupported(Operation.DELETE_CLUSTER)

    async def get_kubeconfig(self, credentials, ref):
        self._unsupported(Operation.GET_KUBECONFIG)

    async def create_node_group(self, credentials, spec):
        self._unsupported(Operation.CREATE_NODE_GROUP)

    async def list_node_groups(self, credentials, request):
        self._unsupported(Operation.LIST_NODE_GROUPS)

    async def get_node_group(self, credentials, ref):
        self._unsupported(Operation.GET_NODE_GROUP)

    async def delete_node_group(self, credentials, ref):
        self._unsupported(Operation.DELETE_NODE_GROUP)
