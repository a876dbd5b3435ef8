"""GCP client for GKE cluster and node pool operations."""

from collections.abc import Callable
from typing import Any

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import container_v1
from google.oauth2 import service_account

from kubeorch.core.config import TimeoutConfig
from kubeorch.core.exceptions import InvalidCredentialError, ProviderAPIError
from kubeorch.utils.logging import get_logger

logger = get_logger(__name__)

PROVIDER = "gcp"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def location_path(project_id: str, location: str) -> str:
    return f"projects/{project_id}/locations/{location}"


def cluster_path(project_id: str, location: str, cluster_name: str) -> str:
    return f"{location_path(project_id, location)}/clusters/{cluster_name}"


def node_pool_path(project_id: str, location: str, cluster_name: str, pool_name: str) -> str:
    return f"{cluster_path(project_id, location, cluster_name)}/nodePools/{pool_name}"


def _to_dict(message: Any) -> dict[str, Any]:
    """Convert a proto-plus message to a dict with snake_case keys and enum names."""
    return type(message).to_dict(message, use_integers_for_enums=False)


class GKEClient:
    """Synchronous GKE client for one project.

    Location (region or zone) is passed per call since GKE clusters may live
    at either. Default GAPIC retries are disabled; every failure surfaces as
    ProviderAPIError.
    """

    def __init__(
        self,
        project_id: str,
        credentials_info: dict[str, Any] | None = None,
        timeouts: TimeoutConfig | None = None,
        client: container_v1.ClusterManagerClient | None = None,
    ):
        """Initialize GKE client.

        Args:
            project_id: GCP project id
            credentials_info: Service account JSON as a dict
            timeouts: Per-call timeout configuration
            client: Existing ClusterManagerClient (optional, overrides credentials)
        """
        self.project_id = project_id
        self.timeout = (timeouts or TimeoutConfig()).read_seconds

        if client:
            self.client = client
        else:
            try:
                credentials = service_account.Credentials.from_service_account_info(
                    credentials_info or {}, scopes=[CLOUD_PLATFORM_SCOPE]
                )
            except (GoogleAuthError, ValueError) as e:
                raise InvalidCredentialError(
                    PROVIDER, message=f"invalid GCP service account: {e}"
                ) from e
            self.client = container_v1.ClusterManagerClient(credentials=credentials)

        logger.debug("gke_client_initialized", project_id=project_id)

    def _call(
        self,
        operation: str,
        location: str,
        resource: str,
        fn: Callable[..., Any],
        **kwargs: Any,
    ) -> Any:
        try:
            return fn(**kwargs, retry=None, timeout=self.timeout)
        except GoogleAPIError as e:
            error_code = type(e).__name__
            logger.debug(
                "gke_call_failed",
                operation=operation,
                location=location,
                resource=resource,
                error_code=error_code,
            )
            raise ProviderAPIError(
                f"GKE {operation} failed: {e}",
                provider=PROVIDER,
                operation=operation,
                location=location,
                resource=resource,
                error_code=error_code,
            ) from e

    def list_clusters(self, location: str) -> list[dict[str, Any]]:
        """List clusters at exactly one location.

        A regional location also returns zonal clusters on some API versions,
        so callers must de-duplicate.
        """
        response = self._call(
            "ListClusters",
            location,
            "",
            self.client.list_clusters,
            parent=location_path(self.project_id, location),
        )
        return [_to_dict(c) for c in response.clusters]

    def get_cluster(self, location: str, name: str) -> dict[str, Any]:
        """Get a cluster at one location."""
        cluster = self._call(
            "GetCluster",
            location,
            name,
            self.client.get_cluster,
            name=cluster_path(self.project_id, location, name),
        )
        return _to_dict(cluster)

    def create_cluster(self, location: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a cluster from a native Cluster payload.

        Returns:
            The long-running operation as a dict
        """
        name = payload.get("name", "")
        logger.info("gke_cluster_creating", cluster_name=name, location=location)
        operation = self._call(
            "CreateCluster",
            location,
            name,
            self.client.create_cluster,
            request={"parent": location_path(self.project_id, location), "cluster": payload},
        )
        return _to_dict(operation)

    def delete_cluster(self, location: str, name: str) -> dict[str, Any]:
        """Delete a cluster at one location."""
        logger.info("gke_cluster_deleting", cluster_name=name, location=location)
        operation = self._call(
            "DeleteCluster",
            location,
            name,
            self.client.delete_cluster,
            name=cluster_path(self.project_id, location, name),
        )
        return _to_dict(operation)

    def list_node_pools(self, location: str, cluster_name: str) -> list[dict[str, Any]]:
        """List node pools of a cluster."""
        response = self._call(
            "ListNodePools",
            location,
            cluster_name,
            self.client.list_node_pools,
            parent=cluster_path(self.project_id, location, cluster_name),
        )
        return [_to_dict(p) for p in response.node_pools]

    def get_node_pool(self, location: str, cluster_name: str, name: str) -> dict[str, Any]:
        """Get a node pool."""
        pool = self._call(
            "GetNodePool",
            location,
            f"{cluster_name}/{name}",
            self.client.get_node_pool,
            name=node_pool_path(self.project_id, location, cluster_name, name),
        )
        return _to_dict(pool)

    def create_node_pool(
        self, location: str, cluster_name: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """Create a node pool from a native NodePool payload."""
        resource = f"{cluster_name}/{payload.get('name', '')}"
        logger.info("gke_node_pool_creating", resource=resource, location=location)
        operation = self._call(
            "CreateNodePool",
            location,
            resource,
            self.client.create_node_pool,
            request={
                "parent": cluster_path(self.project_id, location, cluster_name),
                "node_pool": payload,
            },
        )
        return _to_dict(operation)

    def delete_node_pool(self, location: str, cluster_name: str, name: str) -> dict[str, Any]:
        """Delete a node pool."""
        logger.info(
            "gke_node_pool_deleting", cluster_name=cluster_name, node_pool=name, location=location
        )
        operation = self._call(
            "DeleteNodePool",
            location,
            f"{cluster_name}/{name}",
            self.client.delete_node_pool,
            name=node_pool_path(self.project_id, location, cluster_name, name),
        )
        return _to_dict(operation)
