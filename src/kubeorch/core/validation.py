"""Request validation shared by all drivers.

Every check here runs before the first provider call.
"""

from kubeorch.core.exceptions import (
    InvalidCredentialError,
    InvalidScalingConfigError,
    MissingNetworkConfigError,
    MissingNodePoolConfigError,
)
from kubeorch.core.models import ClusterSpec, NetworkSpec, NodePoolSpec, ScalingConfig


def require_network(spec: ClusterSpec) -> NetworkSpec:
    """Return the spec's network block or raise MissingNetworkConfigError."""
    if spec.network is None:
        raise MissingNetworkConfigError(
            f"network configuration is required for cluster {spec.name}"
        )
    return spec.network


def require_node_pool(spec: ClusterSpec) -> NodePoolSpec:
    """Return the spec's node pool or raise MissingNodePoolConfigError."""
    if spec.node_pool is None:
        raise MissingNodePoolConfigError(
            f"node pool configuration is required for standard cluster {spec.name}"
        )
    return spec.node_pool


def validate_scaling(scaling: ScalingConfig, resource: str = "") -> None:
    """Check 0 <= min <= desired <= max.

    Args:
        scaling: Bounds to check
        resource: Resource name used in the error message

    Raises:
        InvalidScalingConfigError: If the bounds are inconsistent
    """
    lo, want, hi = scaling.min_size, scaling.desired_size, scaling.max_size
    if lo < 0 or lo > want or want > hi:
        target = f" for {resource}" if resource else ""
        raise InvalidScalingConfigError(
            f"invalid scaling configuration{target}: "
            f"require 0 <= min ({lo}) <= desired ({want}) <= max ({hi})",
            min_size=lo,
            desired_size=want,
            max_size=hi,
        )


def validate_node_pool(pool: NodePoolSpec) -> None:
    """Check an inline node pool's bounds when autoscaling is enabled."""
    if pool.autoscaling:
        validate_scaling(
            ScalingConfig(
                min_size=pool.min_nodes,
                max_size=pool.max_nodes,
                desired_size=pool.node_count,
            ),
            resource=pool.name,
        )
    elif pool.node_count < 0:
        raise InvalidScalingConfigError(
            f"invalid scaling configuration for {pool.name}: node count must be >= 0",
            min_size=pool.min_nodes,
            desired_size=pool.node_count,
            max_size=pool.max_nodes,
        )


def require_credential_keys(credentials: dict, keys: list[str], provider: str) -> None:
    """Raise InvalidCredentialError if any key is missing or empty."""
    missing = [k for k in keys if not credentials.get(k)]
    if missing:
        raise InvalidCredentialError(provider, missing)
