"""GCP GKE driver.

GKE clusters are either regional (``us-central1``) or zonal
(``us-central1-b``), and callers only know the region. Point operations
probe the region and its zones in order; listing enumerates all of them.
"""

import re
from collections.abc import Callable
from typing import Any

from google.cloud import container_v1

from kubeorch.clients.gke_client import GKEClient, cluster_path
from kubeorch.core.config import KubeorchConfig
from kubeorch.core.models import (
    ClusterInfo,
    ClusterRef,
    ClusterSpec,
    DeleteResult,
    KubeconfigResult,
    ListClustersRequest,
    ListNodeGroupsRequest,
    ManagementFlags,
    NetworkSummary,
    NodeGroupInfo,
    NodeGroupRef,
    NodeGroupSpec,
    NodePoolSpec,
    NodePoolSummary,
    ScalingConfig,
    SecuritySpec,
    SecuritySummary,
    Taint,
    TaintEffect,
    UpgradeSettings,
)
from kubeorch.core.validation import (
    require_credential_keys,
    require_network,
    require_node_pool,
    validate_node_pool,
    validate_scaling,
)
from kubeorch.drivers.base import BaseDriver, parse_timestamp
from kubeorch.interfaces.cluster_driver import Credentials
from kubeorch.utils.kubeconfig import ExecAuth, build_context_name, render_kubeconfig
from kubeorch.utils.location_prober import LocationProber
from kubeorch.utils.logging import get_logger
from kubeorch.utils.tags import normalize_tags

logger = get_logger(__name__)

REQUIRED_CREDENTIAL_KEYS = ["project_id", "client_email", "private_key", "token_uri"]

_ZONE = re.compile(r"^.+-[a-z]$")
_SELF_LINK_LOCATION = re.compile(r"/(?:locations|zones)/([^/]+)/clusters/")

_TAINT_EFFECT_TO_GKE = {
    TaintEffect.NO_SCHEDULE: container_v1.NodeTaint.Effect.NO_SCHEDULE,
    TaintEffect.PREFER_NO_SCHEDULE: container_v1.NodeTaint.Effect.PREFER_NO_SCHEDULE,
    TaintEffect.NO_EXECUTE: container_v1.NodeTaint.Effect.NO_EXECUTE,
}
_TAINT_EFFECT_FROM_GKE = {k.name: v for v, k in _TAINT_EFFECT_TO_GKE.items()}

ClientFactory = Callable[[Credentials], GKEClient]


def is_zone(location: str) -> bool:
    """Return True if a location name looks like a zone (``<region>-<letter>``)."""
    return bool(_ZONE.match(location))


def extract_zone(cluster: dict[str, Any], query_location: str, region: str) -> str:
    """Derive a cluster's zone.

    A query at a zone pins the zone. A query at the region may return zonal
    clusters too; for those the zone is read from the cluster's reported
    location or self link. Regional clusters get an empty zone.
    """
    if query_location != region:
        return query_location

    reported = cluster.get("location") or cluster.get("zone") or ""
    if reported and reported != region and is_zone(reported):
        return reported

    match = _SELF_LINK_LOCATION.search(cluster.get("self_link") or "")
    if match and is_zone(match.group(1)):
        return match.group(1)
    return ""


def _cluster_key(cluster: dict[str, Any]) -> str:
    return cluster.get("self_link") or cluster.get("id") or cluster.get("name", "")


class GKEDriver(BaseDriver):
    """Driver for GCP GKE."""

    def __init__(
        self,
        config: KubeorchConfig | None = None,
        client_factory: ClientFactory | None = None,
    ):
        """Initialize GKE driver.

        Args:
            config: kubeorch configuration
            client_factory: Builds a GKEClient from service account credentials
        """
        super().__init__(config)
        self._client_factory = client_factory or self._default_client
        self.prober = LocationProber(self.provider, self.config.locations)

    @property
    def provider(self) -> str:
        return "gcp"

    def _default_client(self, credentials: Credentials) -> GKEClient:
        return GKEClient(
            project_id=credentials["project_id"],
            credentials_info=credentials,
            timeouts=self.config.timeouts,
        )

    def _client(self, credentials: Credentials) -> GKEClient:
        require_credential_keys(credentials, REQUIRED_CREDENTIAL_KEYS, self.provider)
        return self._client_factory(credentials)

    async def _find_cluster(
        self, client: GKEClient, region: str, name: str
    ) -> tuple[str, dict[str, Any]]:
        result = await self.prober.probe(
            region,
            f"GKE cluster {name}",
            lambda location: self._run(client.get_cluster, location, name),
        )
        return result.location, result.value

    # Clusters

    def build_cluster_payload(self, spec: ClusterSpec, project_id: str) -> dict[str, Any]:
        """Build the native Cluster payload.

        Raises:
            MissingNetworkConfigError: If the spec has no network block
            MissingNodePoolConfigError: If a standard cluster has no node pool
            InvalidScalingConfigError: If node pool bounds are inconsistent
        """
        network = require_network(spec)

        payload: dict[str, Any] = {
            "name": spec.name,
            "initial_cluster_version": spec.version,
            "network": network.vpc_id,
        }
        if network.subnet_ids:
            payload["subnetwork"] = network.subnet_ids[0]

        if spec.autopilot:
            payload["autopilot"] = {"enabled": True}
        else:
            pool = require_node_pool(spec)
            validate_node_pool(pool)
            payload["node_pools"] = [self.build_node_pool_payload(pool)]

        tags = normalize_tags(spec.tags, self.provider)
        if tags:
            payload["resource_labels"] = tags

        if network.pod_cidr or network.service_cidr:
            ip_policy: dict[str, Any] = {"use_ip_aliases": True}
            if network.pod_cidr:
                ip_policy["cluster_ipv4_cidr_block"] = network.pod_cidr
            if network.service_cidr:
                ip_policy["services_ipv4_cidr_block"] = network.service_cidr
            payload["ip_allocation_policy"] = ip_policy

        if network.private_nodes or network.private_endpoint:
            payload["private_cluster_config"] = {
                "enable_private_nodes": network.private_nodes,
                "enable_private_endpoint": network.private_endpoint,
            }

        if network.authorized_networks:
            payload["master_authorized_networks_config"] = {
                "enabled": True,
                "cidr_blocks": [{"cidr_block": cidr} for cidr in network.authorized_networks],
            }

        if spec.security:
            payload.update(self._security_payload(spec.security, project_id))

        return payload

    @staticmethod
    def _security_payload(security: SecuritySpec, project_id: str) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if security.workload_identity:
            out["workload_identity_config"] = {"workload_pool": f"{project_id}.svc.id.goog"}
        if security.network_policy:
            out["network_policy"] = {
                "enabled": True,
                "provider": container_v1.NetworkPolicy.Provider.CALICO,
            }
        if security.binary_authorization:
            out["binary_authorization"] = {
                "evaluation_mode": (
                    container_v1.BinaryAuthorization.EvaluationMode.PROJECT_SINGLETON_POLICY_ENFORCE
                ),
            }
        return out

    @staticmethod
    def build_node_pool_payload(pool: NodePoolSpec) -> dict[str, Any]:
        """Build a native NodePool payload for an inline node pool."""
        node_config: dict[str, Any] = {
            "machine_type": pool.machine_type,
            "disk_size_gb": pool.disk_size_gb,
            "labels": dict(pool.labels),
        }
        if pool.disk_type:
            node_config["disk_type"] = pool.disk_type
        if pool.preemptible:
            node_config["preemptible"] = True
        if pool.spot:
            node_config["spot"] = True
        if pool.taints:
            node_config["taints"] = [
                {"key": t.key, "value": t.value, "effect": _TAINT_EFFECT_TO_GKE[t.effect]}
                for t in pool.taints
            ]

        payload: dict[str, Any] = {
            "name": pool.name,
            "initial_node_count": pool.node_count,
            "config": node_config,
        }
        if pool.autoscaling:
            payload["autoscaling"] = {
                "enabled": True,
                "min_node_count": pool.min_nodes,
                "max_node_count": pool.max_nodes,
            }
        return payload

    async def create_cluster(self, credentials: Credentials, spec: ClusterSpec) -> ClusterInfo:
        require_credential_keys(credentials, REQUIRED_CREDENTIAL_KEYS, self.provider)
        project_id = credentials["project_id"]
        payload = self.build_cluster_payload(spec, project_id)
        location = spec.zone or spec.region
        client = self._client(credentials)

        await self._run(client.create_cluster, location, payload)

        logger.info(
            "gke_cluster_create_requested",
            cluster_name=spec.name,
            location=location,
            autopilot=spec.autopilot,
        )

        network = spec.network
        return ClusterInfo(
            id=cluster_path(project_id, location, spec.name),
            name=spec.name,
            version=spec.version,
            status="creating",
            region=spec.region,
            zone=spec.zone or "",
            tags=payload.get("resource_labels", {}),
            network=NetworkSummary(
                vpc_id=network.vpc_id,
                subnet_ids=list(network.subnet_ids),
                pod_cidr=network.pod_cidr or "",
                service_cidr=network.service_cidr or "",
                private_endpoint=network.private_endpoint,
            )
            if network
            else None,
        )

    async def list_clusters(
        self, credentials: Credentials, request: ListClustersRequest
    ) -> list[ClusterInfo]:
        client = self._client(credentials)
        found = await self.prober.enumerate(
            request.region,
            lambda location: self._run(client.list_clusters, location),
            key=_cluster_key,
            operation="ListClusters",
        )

        clusters = [
            self.to_cluster_info(
                item.value,
                request.region,
                extract_zone(item.value, item.location, request.region),
            )
            for item in found
        ]
        logger.info("gke_clusters_listed", region=request.region, count=len(clusters))
        return clusters

    async def get_cluster(self, credentials: Credentials, ref: ClusterRef) -> ClusterInfo:
        client = self._client(credentials)
        location, cluster = await self._find_cluster(client, ref.region, ref.name)
        return self.to_cluster_info(cluster, ref.region, extract_zone(cluster, location, ref.region))

    async def delete_cluster(self, credentials: Credentials, ref: ClusterRef) -> DeleteResult:
        client = self._client(credentials)
        location, _ = await self._find_cluster(client, ref.region, ref.name)
        operation = await self._run(client.delete_cluster, location, ref.name)

        logger.info("gke_cluster_delete_requested", cluster_name=ref.name, location=location)
        return DeleteResult(
            name=ref.name,
            region=ref.region,
            location=location,
            operation_id=operation.get("name", ""),
        )

    async def get_kubeconfig(self, credentials: Credentials, ref: ClusterRef) -> KubeconfigResult:
        client = self._client(credentials)
        location, cluster = await self._find_cluster(client, ref.region, ref.name)

        context_name = build_context_name(
            self.provider, location, ref.name, account=credentials["project_id"]
        )
        auth = ExecAuth(
            command=self.config.gcp.auth_plugin_command,
            install_hint=self.config.gcp.auth_plugin_install_hint,
            provide_cluster_info=True,
        )
        kubeconfig = render_kubeconfig(
            endpoint=cluster.get("endpoint", ""),
            ca_data=(cluster.get("master_auth") or {}).get("cluster_ca_certificate", ""),
            context_name=context_name,
            auth=auth,
        )
        return KubeconfigResult(
            cluster_name=ref.name,
            context_name=context_name,
            location=location,
            kubeconfig=kubeconfig,
        )

    # Node pools

    def build_node_group_payload(self, spec: NodeGroupSpec) -> dict[str, Any]:
        """Build a native NodePool payload for a standalone node group.

        Raises:
            InvalidScalingConfigError: If scaling bounds are inconsistent
        """
        validate_scaling(spec.scaling, resource=spec.name)

        node_config: dict[str, Any] = {"labels": dict(spec.labels)}
        if spec.instance_types:
            node_config["machine_type"] = spec.instance_types[0]
        if spec.disk_size_gb:
            node_config["disk_size_gb"] = spec.disk_size_gb
        if spec.disk_type:
            node_config["disk_type"] = spec.disk_type
        if spec.preemptible:
            node_config["preemptible"] = True
        if spec.spot or spec.capacity_type == "SPOT":
            node_config["spot"] = True
        if spec.taints:
            node_config["taints"] = [
                {"key": t.key, "value": t.value, "effect": _TAINT_EFFECT_TO_GKE[t.effect]}
                for t in spec.taints
            ]
        tags = normalize_tags(spec.tags, self.provider)
        if tags:
            node_config["resource_labels"] = tags

        payload: dict[str, Any] = {
            "name": spec.name,
            "initial_node_count": spec.scaling.desired_size,
            "config": node_config,
        }
        if spec.autoscaling:
            payload["autoscaling"] = {
                "enabled": True,
                "min_node_count": spec.scaling.min_size,
                "max_node_count": spec.scaling.max_size,
            }
        if spec.auto_repair is not None or spec.auto_upgrade is not None:
            payload["management"] = {
                "auto_repair": bool(spec.auto_repair),
                "auto_upgrade": bool(spec.auto_upgrade),
            }
        return payload

    async def create_node_group(
        self, credentials: Credentials, spec: NodeGroupSpec
    ) -> NodeGroupInfo:
        payload = self.build_node_group_payload(spec)
        client = self._client(credentials)
        location, _ = await self._find_cluster(client, spec.region, spec.cluster_name)

        await self._run(client.create_node_pool, location, spec.cluster_name, payload)

        logger.info(
            "gke_node_pool_create_requested",
            cluster_name=spec.cluster_name,
            node_pool=spec.name,
            location=location,
        )
        return NodeGroupInfo(
            id=f"{cluster_path(credentials['project_id'], location, spec.cluster_name)}"
            f"/nodePools/{spec.name}",
            name=spec.name,
            status="PROVISIONING",
            cluster_name=spec.cluster_name,
            region=spec.region,
            instance_types=list(spec.instance_types[:1]),
            scaling=spec.scaling,
            disk_size_gb=spec.disk_size_gb or 0,
            disk_type=spec.disk_type or "",
            preemptible=spec.preemptible,
            spot=bool(payload["config"].get("spot")),
            labels=dict(spec.labels),
            taints=list(spec.taints),
            tags=payload["config"].get("resource_labels", {}),
        )

    async def list_node_groups(
        self, credentials: Credentials, request: ListNodeGroupsRequest
    ) -> list[NodeGroupInfo]:
        client = self._client(credentials)
        location, _ = await self._find_cluster(client, request.region, request.cluster_name)
        pools = await self._run(client.list_node_pools, location, request.cluster_name)
        return [self.to_node_group_info(p, request.cluster_name, request.region) for p in pools]

    async def get_node_group(self, credentials: Credentials, ref: NodeGroupRef) -> NodeGroupInfo:
        client = self._client(credentials)
        result = await self.prober.probe(
            ref.region,
            f"GKE node pool {ref.cluster_name}/{ref.name}",
            lambda location: self._run(client.get_node_pool, location, ref.cluster_name, ref.name),
        )
        return self.to_node_group_info(result.value, ref.cluster_name, ref.region)

    async def delete_node_group(self, credentials: Credentials, ref: NodeGroupRef) -> DeleteResult:
        client = self._client(credentials)
        location, _ = await self._find_cluster(client, ref.region, ref.cluster_name)
        operation = await self._run(client.delete_node_pool, location, ref.cluster_name, ref.name)

        logger.info(
            "gke_node_pool_delete_requested",
            cluster_name=ref.cluster_name,
            node_pool=ref.name,
            location=location,
        )
        return DeleteResult(
            name=ref.name,
            region=ref.region,
            location=location,
            cluster_name=ref.cluster_name,
            operation_id=operation.get("name", ""),
        )

    # Translation

    @staticmethod
    def to_cluster_info(cluster: dict[str, Any], region: str, zone: str) -> ClusterInfo:
        """Translate a GKE Cluster dict into ClusterInfo."""
        network = None
        if cluster.get("network") or cluster.get("network_config"):
            net_cfg = cluster.get("network_config") or {}
            subnetwork = cluster.get("subnetwork") or net_cfg.get("subnetwork", "")
            private = cluster.get("private_cluster_config") or {}
            network = NetworkSummary(
                vpc_id=cluster.get("network") or net_cfg.get("network", ""),
                subnet_ids=[subnetwork] if subnetwork else [],
                pod_cidr=cluster.get("cluster_ipv4_cidr", ""),
                service_cidr=cluster.get("services_ipv4_cidr", ""),
                private_endpoint=bool(private.get("enable_private_endpoint")),
            )

        node_pools = None
        pools = cluster.get("node_pools") or []
        if pools:
            summary = NodePoolSummary(total_pools=len(pools))
            for pool in pools:
                summary.total_nodes += pool.get("initial_node_count", 0)
                autoscaling = pool.get("autoscaling") or {}
                if autoscaling.get("enabled"):
                    summary.min_nodes += autoscaling.get("min_node_count", 0)
                    summary.max_nodes += autoscaling.get("max_node_count", 0)
            node_pools = summary

        workload_pool = (cluster.get("workload_identity_config") or {}).get("workload_pool")
        binauthz = cluster.get("binary_authorization") or {}
        binauthz_mode = binauthz.get("evaluation_mode", "")
        security = SecuritySummary(
            workload_identity=bool(workload_pool),
            binary_authorization=bool(binauthz.get("enabled"))
            or binauthz_mode not in ("", "EVALUATION_MODE_UNSPECIFIED", "DISABLED"),
            network_policy=bool((cluster.get("network_policy") or {}).get("enabled")),
        )

        return ClusterInfo(
            id=cluster.get("id") or cluster.get("name", ""),
            name=cluster.get("name", ""),
            version=cluster.get("current_master_version", ""),
            status=cluster.get("status", ""),
            region=region,
            zone=zone,
            endpoint=cluster.get("endpoint", ""),
            created_at=parse_timestamp(cluster.get("create_time")),
            tags=dict(cluster.get("resource_labels") or {}),
            network=network,
            node_pools=node_pools,
            security=security,
        )

    @staticmethod
    def to_node_group_info(pool: dict[str, Any], cluster_name: str, region: str) -> NodeGroupInfo:
        """Translate a GKE NodePool dict into NodeGroupInfo."""
        config = pool.get("config") or {}
        autoscaling = pool.get("autoscaling") or {}
        management = pool.get("management")
        upgrade = pool.get("upgrade_settings")

        taints = [
            Taint(
                key=t.get("key", ""),
                value=t.get("value", ""),
                effect=_TAINT_EFFECT_FROM_GKE.get(t.get("effect", ""), TaintEffect.NO_SCHEDULE),
            )
            for t in config.get("taints") or []
        ]

        machine_type = config.get("machine_type", "")
        return NodeGroupInfo(
            id=pool.get("self_link", ""),
            name=pool.get("name", ""),
            status=pool.get("status", ""),
            cluster_name=cluster_name,
            region=region,
            version=pool.get("version", ""),
            instance_types=[machine_type] if machine_type else [],
            scaling=ScalingConfig(
                min_size=autoscaling.get("min_node_count", 0),
                max_size=autoscaling.get("max_node_count", 0),
                desired_size=pool.get("initial_node_count", 0),
            ),
            disk_size_gb=config.get("disk_size_gb", 0),
            disk_type=config.get("disk_type", ""),
            image_type=config.get("image_type", ""),
            preemptible=bool(config.get("preemptible")),
            spot=bool(config.get("spot")),
            service_account=config.get("service_account", ""),
            oauth_scopes=list(config.get("oauth_scopes") or []),
            labels=dict(config.get("labels") or {}),
            taints=taints,
            tags=dict(config.get("resource_labels") or {}),
            management=ManagementFlags(
                auto_repair=bool(management.get("auto_repair")),
                auto_upgrade=bool(management.get("auto_upgrade")),
            )
            if management
            else None,
            upgrade=UpgradeSettings(
                max_surge=upgrade.get("max_surge", 0),
                max_unavailable=upgrade.get("max_unavailable", 0),
                strategy=upgrade.get("strategy", ""),
            )
            if upgrade
            else None,
        )
