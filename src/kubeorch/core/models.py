"""Core data models for kubeorch.

Input specs are provider-agnostic. Drivers translate them into native payloads
and translate native responses back into ``ClusterInfo`` / ``NodeGroupInfo``.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Provider(str, Enum):
    """Known provider identifiers."""

    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"
    NCP = "ncp"


class Operation(str, Enum):
    """Orchestrator operations."""

    CREATE_CLUSTER = "create_cluster"
    LIST_CLUSTERS = "list_clusters"
    GET_CLUSTER = "get_cluster"
    DELETE_CLUSTER = "delete_cluster"
    GET_KUBECONFIG = "get_kubeconfig"
    CREATE_NODE_GROUP = "create_node_group"
    LIST_NODE_GROUPS = "list_node_groups"
    GET_NODE_GROUP = "get_node_group"
    DELETE_NODE_GROUP = "delete_node_group"


class TaintEffect(str, Enum):
    """Kubernetes taint effects."""

    NO_SCHEDULE = "NoSchedule"
    PREFER_NO_SCHEDULE = "PreferNoSchedule"
    NO_EXECUTE = "NoExecute"


class Taint(BaseModel):
    """Node taint."""

    key: str
    value: str = ""
    effect: TaintEffect = TaintEffect.NO_SCHEDULE


class ScalingConfig(BaseModel):
    """Node count bounds. Validated by drivers before any provider call."""

    min_size: int = 0
    max_size: int = 0
    desired_size: int = 0


class NetworkSpec(BaseModel):
    """Network placement for a cluster."""

    vpc_id: str = Field(..., description="VPC (AWS) or network (GCP) identifier")
    subnet_ids: list[str] = Field(default_factory=list)
    security_group_ids: list[str] = Field(default_factory=list)
    pod_cidr: str | None = Field(None, description="Secondary range or CIDR for pods")
    service_cidr: str | None = Field(None, description="Secondary range or CIDR for services")
    private_nodes: bool = False
    private_endpoint: bool = False
    authorized_networks: list[str] = Field(
        default_factory=list, description="CIDRs allowed to reach the control plane"
    )


class NodePoolSpec(BaseModel):
    """Node pool created inline with a cluster."""

    name: str
    machine_type: str
    disk_size_gb: int = 100
    disk_type: str | None = None
    node_count: int = 1
    min_nodes: int = 0
    max_nodes: int = 0
    autoscaling: bool = False
    preemptible: bool = False
    spot: bool = False
    labels: dict[str, str] = Field(default_factory=dict)
    taints: list[Taint] = Field(default_factory=list)


class SecuritySpec(BaseModel):
    """Cluster security features."""

    workload_identity: bool = False
    binary_authorization: bool = False
    network_policy: bool = False


class AccessConfigSpec(BaseModel):
    """EKS access-entry settings. ``None`` fields fall back to configuration."""

    authentication_mode: str | None = None
    bootstrap_cluster_creator_admin_permissions: bool | None = None


class ClusterSpec(BaseModel):
    """Provider-agnostic cluster creation request."""

    name: str = Field(..., description="Cluster name")
    version: str = Field(..., description="Kubernetes version")
    region: str = Field(..., description="Provider region")
    zone: str | None = Field(None, description="Zone for zonal clusters")
    network: NetworkSpec | None = None
    node_pool: NodePoolSpec | None = None
    security: SecuritySpec | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    autopilot: bool = Field(False, description="Fully managed mode without node pools")
    role_arn: str | None = Field(None, description="EKS cluster service role ARN")
    access: AccessConfigSpec | None = None


class NodeGroupSpec(BaseModel):
    """Provider-agnostic node group creation request."""

    cluster_name: str
    name: str
    region: str
    instance_types: list[str] = Field(default_factory=list)
    scaling: ScalingConfig = Field(default_factory=ScalingConfig)
    autoscaling: bool = False
    disk_size_gb: int | None = None
    disk_type: str | None = None
    capacity_type: str | None = Field(None, description="ON_DEMAND or SPOT (EKS)")
    preemptible: bool = False
    spot: bool = False
    labels: dict[str, str] = Field(default_factory=dict)
    taints: list[Taint] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    node_role_arn: str | None = None
    subnet_ids: list[str] = Field(default_factory=list)
    ami_type: str | None = None
    auto_repair: bool | None = None
    auto_upgrade: bool | None = None


class ClusterRef(BaseModel):
    """Reference to a cluster by name and region."""

    name: str
    region: str


class ListClustersRequest(BaseModel):
    """List all clusters in a region."""

    region: str


class NodeGroupRef(BaseModel):
    """Reference to a node group within a cluster."""

    cluster_name: str
    name: str
    region: str


class ListNodeGroupsRequest(BaseModel):
    """List node groups of a cluster."""

    cluster_name: str
    region: str


class Credential(BaseModel):
    """Encrypted provider credential. Decrypted only inside one orchestrator call."""

    provider: str
    encrypted_data: bytes

    def __repr__(self) -> str:
        return f"Credential(provider={self.provider!r}, encrypted_data=<{len(self.encrypted_data)} bytes>)"


class NetworkSummary(BaseModel):
    """Network facts reported by the provider."""

    vpc_id: str = ""
    subnet_ids: list[str] = Field(default_factory=list)
    security_group_ids: list[str] = Field(default_factory=list)
    pod_cidr: str = ""
    service_cidr: str = ""
    private_endpoint: bool = False


class NodePoolSummary(BaseModel):
    """Aggregate node pool counts for a cluster."""

    total_pools: int = 0
    total_nodes: int = 0
    min_nodes: int = 0
    max_nodes: int = 0


class SecuritySummary(BaseModel):
    """Security features reported by the provider."""

    workload_identity: bool = False
    binary_authorization: bool = False
    network_policy: bool = False


class ClusterInfo(BaseModel):
    """Normalized cluster description. Built fresh on every read."""

    id: str
    name: str
    version: str = ""
    status: str = Field("", description="Provider-native status, passed through")
    region: str
    zone: str = Field("", description="Empty for region-scoped clusters")
    endpoint: str = ""
    created_at: datetime | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    network: NetworkSummary | None = None
    node_pools: NodePoolSummary | None = None
    security: SecuritySummary | None = None


class ManagementFlags(BaseModel):
    """Node auto-repair and auto-upgrade flags."""

    auto_repair: bool = False
    auto_upgrade: bool = False


class UpgradeSettings(BaseModel):
    """Surge upgrade settings."""

    max_surge: int = 0
    max_unavailable: int | None = None
    max_unavailable_percentage: int | None = None
    strategy: str = ""


class NodeGroupInfo(BaseModel):
    """Normalized node group description."""

    id: str = ""
    name: str
    status: str = ""
    cluster_name: str
    region: str
    version: str = ""
    instance_types: list[str] = Field(default_factory=list)
    scaling: ScalingConfig = Field(default_factory=ScalingConfig)
    capacity_type: str = ""
    disk_size_gb: int = 0
    disk_type: str = ""
    image_type: str = ""
    preemptible: bool = False
    spot: bool = False
    service_account: str = ""
    oauth_scopes: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    taints: list[Taint] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    management: ManagementFlags | None = None
    upgrade: UpgradeSettings | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DeleteResult(BaseModel):
    """Result of an accepted asynchronous delete of a cluster or node group."""

    name: str
    region: str
    location: str = ""
    cluster_name: str = ""
    status: str = "deleting"
    operation_id: str = ""


class KubeconfigResult(BaseModel):
    """Rendered kubeconfig for a cluster."""

    cluster_name: str
    context_name: str
    location: str
    kubeconfig: str
