"""AWS client for EKS cluster and node group operations and EC2 location lookups."""

from collections.abc import Callable
from typing import Any, cast

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from kubeorch.core.config import TimeoutConfig
from kubeorch.core.exceptions import ProviderAPIError
from kubeorch.utils.logging import get_logger

logger = get_logger(__name__)

PROVIDER = "aws"


class EKSClient:
    """Synchronous EKS client bound to one region and one set of static keys.

    Every failure surfaces as ProviderAPIError carrying the EKS error code.
    No retries are configured; a failed call fails the operation.
    """

    def __init__(
        self,
        region: str,
        access_key: str | None = None,
        secret_key: str | None = None,
        session_token: str | None = None,
        timeouts: TimeoutConfig | None = None,
        session: boto3.Session | None = None,
    ):
        """Initialize EKS client.

        Args:
            region: AWS region
            access_key: AWS access key id
            secret_key: AWS secret access key
            session_token: Session token for temporary credentials (optional)
            timeouts: Connect/read timeouts
            session: Existing boto3 session (optional, overrides keys)
        """
        self.region = region
        timeouts = timeouts or TimeoutConfig()

        if session:
            self.session = session
        else:
            self.session = boto3.Session(
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                aws_session_token=session_token,
                region_name=region,
            )

        botocore_config = Config(
            connect_timeout=timeouts.connect_seconds,
            read_timeout=timeouts.read_seconds,
            retries={"max_attempts": 1, "mode": "standard"},
        )
        self.eks = self.session.client("eks", region_name=region, config=botocore_config)
        self.ec2 = self.session.client("ec2", region_name=region, config=botocore_config)

        logger.debug("eks_client_initialized", region=region)

    def _call(
        self, operation: str, resource: str, fn: Callable[..., Any], **kwargs: Any
    ) -> dict[str, Any]:
        try:
            return cast(dict[str, Any], fn(**kwargs))
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            message = e.response["Error"].get("Message", "")
            logger.error(
                "eks_call_failed",
                operation=operation,
                resource=resource,
                region=self.region,
                error_code=error_code,
            )
            raise ProviderAPIError(
                f"AWS {operation} failed: {error_code}: {message}",
                provider=PROVIDER,
                operation=operation,
                location=self.region,
                resource=resource,
                error_code=error_code,
            ) from e
        except BotoCoreError as e:
            logger.error(
                "eks_call_failed",
                operation=operation,
                resource=resource,
                region=self.region,
                error=str(e),
            )
            raise ProviderAPIError(
                f"AWS {operation} failed: {e}",
                provider=PROVIDER,
                operation=operation,
                location=self.region,
                resource=resource,
            ) from e

    def list_cluster_names(self) -> list[str]:
        """List all EKS cluster names in the region.

        Returns:
            Cluster names

        Raises:
            ProviderAPIError: If listing fails
        """
        names: list[str] = []
        kwargs: dict[str, Any] = {}
        while True:
            response = self._call("ListClusters", "", self.eks.list_clusters, **kwargs)
            names.extend(response.get("clusters", []))
            token = response.get("nextToken")
            if not token:
                break
            kwargs["nextToken"] = token

        logger.info("eks_clusters_listed", region=self.region, count=len(names))
        return names

    def describe_cluster(self, name: str) -> dict[str, Any]:
        """Describe an EKS cluster.

        Raises:
            ProviderAPIError: If the cluster does not exist or the call fails
        """
        response = self._call("DescribeCluster", name, self.eks.describe_cluster, name=name)
        return cast(dict[str, Any], response["cluster"])

    def create_cluster(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create an EKS cluster from a native CreateCluster payload."""
        name = payload.get("name", "")
        logger.info("eks_cluster_creating", cluster_name=name, region=self.region)
        response = self._call("CreateCluster", name, self.eks.create_cluster, **payload)
        return cast(dict[str, Any], response["cluster"])

    def delete_cluster(self, name: str) -> dict[str, Any]:
        """Delete an EKS cluster."""
        logger.info("eks_cluster_deleting", cluster_name=name, region=self.region)
        response = self._call("DeleteCluster", name, self.eks.delete_cluster, name=name)
        return cast(dict[str, Any], response["cluster"])

    def list_nodegroup_names(self, cluster_name: str) -> list[str]:
        """List node group names of a cluster."""
        names: list[str] = []
        kwargs: dict[str, Any] = {"clusterName": cluster_name}
        while True:
            response = self._call(
                "ListNodegroups", cluster_name, self.eks.list_nodegroups, **kwargs
            )
            names.extend(response.get("nodegroups", []))
            token = response.get("nextToken")
            if not token:
                break
            kwargs["nextToken"] = token
        return names

    def describe_nodegroup(self, cluster_name: str, name: str) -> dict[str, Any]:
        """Describe a node group."""
        response = self._call(
            "DescribeNodegroup",
            f"{cluster_name}/{name}",
            self.eks.describe_nodegroup,
            clusterName=cluster_name,
            nodegroupName=name,
        )
        return cast(dict[str, Any], response["nodegroup"])

    def create_nodegroup(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a node group from a native CreateNodegroup payload."""
        resource = f"{payload.get('clusterName', '')}/{payload.get('nodegroupName', '')}"
        logger.info("eks_nodegroup_creating", resource=resource, region=self.region)
        response = self._call("CreateNodegroup", resource, self.eks.create_nodegroup, **payload)
        return cast(dict[str, Any], response["nodegroup"])

    def delete_nodegroup(self, cluster_name: str, name: str) -> dict[str, Any]:
        """Delete a node group."""
        logger.info(
            "eks_nodegroup_deleting", cluster_name=cluster_name, nodegroup=name, region=self.region
        )
        response = self._call(
            "DeleteNodegroup",
            f"{cluster_name}/{name}",
            self.eks.delete_nodegroup,
            clusterName=cluster_name,
            nodegroupName=name,
        )
        return cast(dict[str, Any], response["nodegroup"])

    def list_cluster_versions(self) -> list[str]:
        """List Kubernetes versions EKS accepts for new clusters, newest first."""
        versions: list[str] = []
        kwargs: dict[str, Any] = {}
        while True:
            response = self._call(
                "DescribeClusterVersions", "", self.eks.describe_cluster_versions, **kwargs
            )
            versions.extend(
                v["clusterVersion"] for v in response.get("clusterVersions", [])
            )
            token = response.get("nextToken")
            if not token:
                break
            kwargs["nextToken"] = token

        return sorted(set(versions), key=_version_key, reverse=True)

    def list_regions(self) -> list[str]:
        """List regions enabled for the account."""
        response = self._call("DescribeRegions", "", self.ec2.describe_regions, AllRegions=False)
        return sorted(r["RegionName"] for r in response.get("Regions", []))

    def list_availability_zones(self) -> list[str]:
        """List availability zones in this client's region that are in state ``available``."""
        response = self._call(
            "DescribeAvailabilityZones",
            self.region,
            self.ec2.describe_availability_zones,
            Filters=[{"Name": "state", "Values": ["available"]}],
        )
        return sorted(z["ZoneName"] for z in response.get("AvailabilityZones", []))


def _version_key(version: str) -> tuple[int, ...]:
    return tuple(int(part) if part.isdigit() else 0 for part in version.split("."))
