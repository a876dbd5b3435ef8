"""AWS EKS driver.

EKS clusters are region-scoped, so no location probing is needed and
``ClusterInfo.zone`` is always empty. Node groups are created separately
from the cluster.
"""

from collections.abc import Callable
from typing import Any

from kubeorch.clients.eks_client import EKSClient
from kubeorch.core.config import KubeorchConfig
from kubeorch.core.exceptions import NotFoundAnyLocationError, ProviderAPIError
from kubeorch.core.models import (
    ClusterInfo,
    ClusterRef,
    ClusterSpec,
    DeleteResult,
    KubeconfigResult,
    ListClustersRequest,
    ListNodeGroupsRequest,
    NetworkSummary,
    NodeGroupInfo,
    NodeGroupRef,
    NodeGroupSpec,
    ScalingConfig,
    Taint,
    TaintEffect,
    UpgradeSettings,
)
from kubeorch.core.validation import (
    require_credential_keys,
    require_network,
    validate_node_pool,
    validate_scaling,
)
from kubeorch.drivers.base import BaseDriver, parse_timestamp
from kubeorch.interfaces.cluster_driver import Credentials
from kubeorch.interfaces.provider_metadata import ProviderMetadata
from kubeorch.utils.kubeconfig import ExecAuth, build_context_name, render_kubeconfig
from kubeorch.utils.logging import get_logger
from kubeorch.utils.tags import normalize_tags

logger = get_logger(__name__)

REQUIRED_CREDENTIAL_KEYS = ["access_key", "secret_key"]
NOT_FOUND = "ResourceNotFoundException"

_TAINT_EFFECT_TO_EKS = {
    TaintEffect.NO_SCHEDULE: "NO_SCHEDULE",
    TaintEffect.PREFER_NO_SCHEDULE: "PREFER_NO_SCHEDULE",
    TaintEffect.NO_EXECUTE: "NO_EXECUTE",
}
_TAINT_EFFECT_FROM_EKS = {v: k for k, v in _TAINT_EFFECT_TO_EKS.items()}

ClientFactory = Callable[[Credentials, str], EKSClient]


class EKSDriver(BaseDriver, ProviderMetadata):
    """Driver for AWS EKS."""

    def __init__(
        self,
        config: KubeorchConfig | None = None,
        client_factory: ClientFactory | None = None,
    ):
        """Initialize EKS driver.

        Args:
            config: kubeorch configuration
            client_factory: Builds an EKSClient from credentials and region
        """
        super().__init__(config)
        self._client_factory = client_factory or self._default_client

    @property
    def provider(self) -> str:
        return "aws"

    def _default_client(self, credentials: Credentials, region: str) -> EKSClient:
        return EKSClient(
            region=region,
            access_key=credentials["access_key"],
            secret_key=credentials["secret_key"],
            session_token=credentials.get("session_token"),
            timeouts=self.config.timeouts,
        )

    def _client(self, credentials: Credentials, region: str) -> EKSClient:
        require_credential_keys(credentials, REQUIRED_CREDENTIAL_KEYS, self.provider)
        return self._client_factory(credentials, region)

    def _raise_not_found(self, error: ProviderAPIError, resource: str, region: str) -> None:
        """Re-raise a ResourceNotFoundException as NotFoundAnyLocationError."""
        if error.error_code == NOT_FOUND:
            raise NotFoundAnyLocationError(
                resource, region, [region], {region: str(error)}
            ) from error

    # Clusters

    def build_cluster_payload(self, spec: ClusterSpec) -> dict[str, Any]:
        """Build the native CreateCluster payload.

        Raises:
            MissingNetworkConfigError: If the spec has no network block
            InvalidScalingConfigError: If an inline node pool has bad bounds
        """
        network = require_network(spec)
        if spec.node_pool is not None:
            validate_node_pool(spec.node_pool)

        vpc_config: dict[str, Any] = {"subnetIds": list(network.subnet_ids)}
        if network.security_group_ids:
            vpc_config["securityGroupIds"] = list(network.security_group_ids)
        if network.private_endpoint:
            vpc_config["endpointPrivateAccess"] = True
            vpc_config["endpointPublicAccess"] = False
        if network.authorized_networks and not network.private_endpoint:
            vpc_config["publicAccessCidrs"] = list(network.authorized_networks)

        access = spec.access
        auth_mode = (access and access.authentication_mode) or self.config.aws.authentication_mode
        bootstrap = self.config.aws.bootstrap_cluster_creator_admin_permissions
        if access and access.bootstrap_cluster_creator_admin_permissions is not None:
            bootstrap = access.bootstrap_cluster_creator_admin_permissions

        payload: dict[str, Any] = {
            "name": spec.name,
            "version": spec.version,
            "resourcesVpcConfig": vpc_config,
            "accessConfig": {
                "authenticationMode": auth_mode,
                "bootstrapClusterCreatorAdminPermissions": bootstrap,
            },
        }
        if spec.role_arn:
            payload["roleArn"] = spec.role_arn
        if network.service_cidr:
            payload["kubernetesNetworkConfig"] = {"serviceIpv4Cidr": network.service_cidr}
        if network.pod_cidr:
            logger.warning("eks_pod_cidr_ignored", cluster_name=spec.name)

        tags = normalize_tags(spec.tags, self.provider)
        if tags:
            payload["tags"] = tags
        return payload

    async def create_cluster(self, credentials: Credentials, spec: ClusterSpec) -> ClusterInfo:
        payload = self.build_cluster_payload(spec)
        client = self._client(credentials, spec.region)

        if spec.node_pool is not None:
            logger.warning(
                "eks_inline_node_pool_not_created",
                cluster_name=spec.name,
                node_pool=spec.node_pool.name,
            )

        cluster = await self._run(client.create_cluster, payload)

        logger.info("eks_cluster_create_requested", cluster_name=spec.name, region=spec.region)
        info = self.to_cluster_info(cluster, spec.region)
        info.status = "creating"
        return info

    async def list_clusters(
        self, credentials: Credentials, request: ListClustersRequest
    ) -> list[ClusterInfo]:
        client = self._client(credentials, request.region)
        names = await self._run(client.list_cluster_names)

        clusters: list[ClusterInfo] = []
        for name in names:
            try:
                cluster = await self._run(client.describe_cluster, name)
            except ProviderAPIError as e:
                logger.warning(
                    "eks_cluster_describe_skipped",
                    cluster_name=name,
                    region=request.region,
                    error=str(e),
                )
                continue
            clusters.append(self.to_cluster_info(cluster, request.region))

        logger.info("eks_clusters_listed", region=request.region, count=len(clusters))
        return clusters

    async def _describe(self, client: EKSClient, ref: ClusterRef) -> dict[str, Any]:
        try:
            return await self._run(client.describe_cluster, ref.name)
        except ProviderAPIError as e:
            self._raise_not_found(e, ref.name, ref.region)
            raise

    async def get_cluster(self, credentials: Credentials, ref: ClusterRef) -> ClusterInfo:
        client = self._client(credentials, ref.region)
        cluster = await self._describe(client, ref)
        return self.to_cluster_info(cluster, ref.region)

    async def delete_cluster(self, credentials: Credentials, ref: ClusterRef) -> DeleteResult:
        client = self._client(credentials, ref.region)
        try:
            cluster = await self._run(client.delete_cluster, ref.name)
        except ProviderAPIError as e:
            self._raise_not_found(e, ref.name, ref.region)
            raise

        return DeleteResult(
            name=ref.name,
            region=ref.region,
            location=ref.region,
            status=cluster.get("status", "DELETING"),
            operation_id=cluster.get("arn", ""),
        )

    async def get_kubeconfig(self, credentials: Credentials, ref: ClusterRef) -> KubeconfigResult:
        client = self._client(credentials, ref.region)
        cluster = await self._describe(client, ref)

        context_name = build_context_name(self.provider, ref.region, ref.name)
        auth = ExecAuth(
            command=self.config.aws.cli_command,
            args=["--region", ref.region, "eks", "get-token", "--cluster-name", ref.name],
        )
        kubeconfig = render_kubeconfig(
            endpoint=cluster.get("endpoint", ""),
            ca_data=cluster.get("certificateAuthority", {}).get("data", ""),
            context_name=context_name,
            auth=auth,
        )
        return KubeconfigResult(
            cluster_name=ref.name,
            context_name=context_name,
            location=ref.region,
            kubeconfig=kubeconfig,
        )

    # Node groups

    def build_node_group_payload(self, spec: NodeGroupSpec) -> dict[str, Any]:
        """Build the native CreateNodegroup payload.

        Raises:
            InvalidScalingConfigError: If scaling bounds are inconsistent
        """
        validate_scaling(spec.scaling, resource=spec.name)

        payload: dict[str, Any] = {
            "clusterName": spec.cluster_name,
            "nodegroupName": spec.name,
            "subnets": list(spec.subnet_ids),
            "instanceTypes": list(spec.instance_types),
            "scalingConfig": {
                "minSize": spec.scaling.min_size,
                "maxSize": spec.scaling.max_size,
                "desiredSize": spec.scaling.desired_size,
            },
        }
        if spec.node_role_arn:
            payload["nodeRole"] = spec.node_role_arn
        if spec.disk_size_gb:
            payload["diskSize"] = spec.disk_size_gb
        if spec.ami_type:
            payload["amiType"] = spec.ami_type
        if spec.spot or spec.preemptible:
            payload["capacityType"] = "SPOT"
        elif spec.capacity_type:
            payload["capacityType"] = spec.capacity_type
        if spec.labels:
            payload["labels"] = dict(spec.labels)
        if spec.taints:
            payload["taints"] = [
                {"key": t.key, "value": t.value, "effect": _TAINT_EFFECT_TO_EKS[t.effect]}
                for t in spec.taints
            ]
        tags = normalize_tags(spec.tags, self.provider)
        if tags:
            payload["tags"] = tags
        return payload

    async def create_node_group(
        self, credentials: Credentials, spec: NodeGroupSpec
    ) -> NodeGroupInfo:
        payload = self.build_node_group_payload(spec)
        client = self._client(credentials, spec.region)
        nodegroup = await self._run(client.create_nodegroup, payload)
        logger.info(
            "eks_nodegroup_create_requested",
            cluster_name=spec.cluster_name,
            nodegroup=spec.name,
            region=spec.region,
        )
        return self.to_node_group_info(nodegroup, spec.region)

    async def list_node_groups(
        self, credentials: Credentials, request: ListNodeGroupsRequest
    ) -> list[NodeGroupInfo]:
        client = self._client(credentials, request.region)
        try:
            names = await self._run(client.list_nodegroup_names, request.cluster_name)
        except ProviderAPIError as e:
            self._raise_not_found(e, request.cluster_name, request.region)
            raise

        groups: list[NodeGroupInfo] = []
        for name in names:
            try:
                nodegroup = await self._run(client.describe_nodegroup, request.cluster_name, name)
            except ProviderAPIError as e:
                logger.warning(
                    "eks_nodegroup_describe_skipped",
                    cluster_name=request.cluster_name,
                    nodegroup=name,
                    error=str(e),
                )
                continue
            groups.append(self.to_node_group_info(nodegroup, request.region))
        return groups

    async def get_node_group(self, credentials: Credentials, ref: NodeGroupRef) -> NodeGroupInfo:
        client = self._client(credentials, ref.region)
        try:
            nodegroup = await self._run(client.describe_nodegroup, ref.cluster_name, ref.name)
        except ProviderAPIError as e:
            self._raise_not_found(e, f"{ref.cluster_name}/{ref.name}", ref.region)
            raise
        return self.to_node_group_info(nodegroup, ref.region)

    async def delete_node_group(self, credentials: Credentials, ref: NodeGroupRef) -> DeleteResult:
        client = self._client(credentials, ref.region)
        try:
            nodegroup = await self._run(client.delete_nodegroup, ref.cluster_name, ref.name)
        except ProviderAPIError as e:
            self._raise_not_found(e, f"{ref.cluster_name}/{ref.name}", ref.region)
            raise

        return DeleteResult(
            name=ref.name,
            region=ref.region,
            location=ref.region,
            cluster_name=ref.cluster_name,
            status=nodegroup.get("status", "DELETING"),
            operation_id=nodegroup.get("nodegroupArn", ""),
        )

    # Catalogue

    async def list_versions(self, credentials: Credentials, region: str) -> list[str]:
        client = self._client(credentials, region)
        versions = await self._run(client.list_cluster_versions)
        logger.info("eks_versions_listed", region=region, count=len(versions))
        return versions

    async def list_regions(self, credentials: Credentials) -> list[str]:
        client = self._client(credentials, self.config.aws.metadata_region)
        regions = await self._run(client.list_regions)
        logger.info("aws_regions_listed", count=len(regions))
        return regions

    async def list_availability_zones(self, credentials: Credentials, region: str) -> list[str]:
        client = self._client(credentials, region)
        zones = await self._run(client.list_availability_zones)
        logger.info("aws_availability_zones_listed", region=region, count=len(zones))
        return zones

    # Translation

    @staticmethod
    def to_cluster_info(cluster: dict[str, Any], region: str) -> ClusterInfo:
        """Translate a DescribeCluster response into ClusterInfo."""
        vpc = cluster.get("resourcesVpcConfig") or {}
        k8s_net = cluster.get("kubernetesNetworkConfig") or {}

        network = None
        if vpc:
            network = NetworkSummary(
                vpc_id=vpc.get("vpcId", ""),
                subnet_ids=list(vpc.get("subnetIds", [])),
                security_group_ids=list(vpc.get("securityGroupIds", [])),
                service_cidr=k8s_net.get("serviceIpv4Cidr", ""),
                private_endpoint=bool(
                    vpc.get("endpointPrivateAccess") and not vpc.get("endpointPublicAccess", True)
                ),
            )

        return ClusterInfo(
            id=cluster.get("arn") or cluster.get("name", ""),
            name=cluster.get("name", ""),
            version=cluster.get("version", ""),
            status=cluster.get("status", ""),
            region=region,
            zone="",
            endpoint=cluster.get("endpoint", ""),
            created_at=parse_timestamp(cluster.get("createdAt")),
            tags=dict(cluster.get("tags") or {}),
            network=network,
        )

    @staticmethod
    def to_node_group_info(nodegroup: dict[str, Any], region: str) -> NodeGroupInfo:
        """Translate a DescribeNodegroup response into NodeGroupInfo."""
        scaling = nodegroup.get("scalingConfig") or {}
        update = nodegroup.get("updateConfig") or {}

        taints = [
            Taint(
                key=t.get("key", ""),
                value=t.get("value", ""),
                effect=_TAINT_EFFECT_FROM_EKS.get(t.get("effect", ""), TaintEffect.NO_SCHEDULE),
            )
            for t in nodegroup.get("taints") or []
        ]

        upgrade = None
        if update:
            upgrade = UpgradeSettings(
                max_unavailable=update.get("maxUnavailable"),
                max_unavailable_percentage=update.get("maxUnavailablePercentage"),
            )

        capacity_type = nodegroup.get("capacityType", "")
        return NodeGroupInfo(
            id=nodegroup.get("nodegroupArn", ""),
            name=nodegroup.get("nodegroupName", ""),
            status=nodegroup.get("status", ""),
            cluster_name=nodegroup.get("clusterName", ""),
            region=region,
            version=nodegroup.get("version", ""),
            instance_types=list(nodegroup.get("instanceTypes") or []),
            scaling=ScalingConfig(
                min_size=scaling.get("minSize", 0),
                max_size=scaling.get("maxSize", 0),
                desired_size=scaling.get("desiredSize", 0),
            ),
            capacity_type=capacity_type,
            spot=capacity_type == "SPOT",
            disk_size_gb=nodegroup.get("diskSize") or 0,
            image_type=nodegroup.get("amiType", ""),
            labels=dict(nodegroup.get("labels") or {}),
            taints=taints,
            tags=dict(nodegroup.get("tags") or {}),
            upgrade=upgrade,
            created_at=parse_timestamp(nodegroup.get("createdAt")),
            updated_at=parse_timestamp(nodegroup.get("modifiedAt")),
        )
