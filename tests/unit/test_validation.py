"""Tests for request validation helpers."""

import pytest

from kubeorch.core.exceptions import (
    InvalidCredentialError,
    InvalidScalingConfigError,
    MissingNetworkConfigError,
    MissingNodePoolConfigError,
)
from kubeorch.core.models import ClusterSpec, NetworkSpec, NodePoolSpec, ScalingConfig
from kubeorch.core.validation import (
    require_credential_keys,
    require_network,
    require_node_pool,
    validate_node_pool,
    validate_scaling,
)


class TestValidateScaling:
    """Test the 0 <= min <= desired <= max rule."""

    @pytest.mark.parametrize(
        ("lo", "want", "hi"),
        [(0, 0, 0), (1, 1, 1), (1, 3, 5), (0, 5, 5)],
    )
    def test_valid(self, lo: int, want: int, hi: int) -> None:
        """Test consistent bounds pass."""
        validate_scaling(ScalingConfig(min_size=lo, desired_size=want, max_size=hi))

    @pytest.mark.parametrize(
        ("lo", "want", "hi"),
        [(5, 4, 3), (-1, 0, 1), (2, 1, 3), (1, 4, 3)],
    )
    def test_invalid(self, lo: int, want: int, hi: int) -> None:
        """Test inconsistent bounds raise with the offending values."""
        with pytest.raises(InvalidScalingConfigError) as exc_info:
            validate_scaling(
                ScalingConfig(min_size=lo, desired_size=want, max_size=hi), resource="workers"
            )

        err = exc_info.value
        assert (err.min_size, err.desired_size, err.max_size) == (lo, want, hi)
        assert "workers" in str(err)


class TestValidateNodePool:
    """Test inline node pool validation."""

    def test_autoscaling_checked(self) -> None:
        """Test autoscaling pools must satisfy the bounds check."""
        pool = NodePoolSpec(
            name="p", machine_type="m", node_count=4, min_nodes=5, max_nodes=3, autoscaling=True
        )

        with pytest.raises(InvalidScalingConfigError):
            validate_node_pool(pool)

    def test_fixed_size_ignores_bounds(self) -> None:
        """Test fixed-size pools only need a non-negative count."""
        validate_node_pool(NodePoolSpec(name="p", machine_type="m", node_count=3))

    def test_fixed_size_negative_count(self) -> None:
        """Test a negative node count is rejected."""
        with pytest.raises(InvalidScalingConfigError):
            validate_node_pool(NodePoolSpec(name="p", machine_type="m", node_count=-1))


class TestRequireBlocks:
    """Test network and node pool presence checks."""

    def test_missing_network(self) -> None:
        """Test a spec without network is rejected."""
        spec = ClusterSpec(name="c", version="1.29", region="r1")

        with pytest.raises(MissingNetworkConfigError):
            require_network(spec)

    def test_network_returned(self) -> None:
        """Test the network block is returned when present."""
        net = NetworkSpec(vpc_id="v")
        spec = ClusterSpec(name="c", version="1.29", region="r1", network=net)

        assert require_network(spec) == net

    def test_missing_node_pool(self) -> None:
        """Test a spec without node pool is rejected."""
        spec = ClusterSpec(name="c", version="1.29", region="r1")

        with pytest.raises(MissingNodePoolConfigError):
            require_node_pool(spec)


class TestRequireCredentialKeys:
    """Test credential map checks."""

    def test_missing_keys_listed(self) -> None:
        """Test every missing key is reported."""
        with pytest.raises(InvalidCredentialError) as exc_info:
            require_credential_keys({"access_key": "a"}, ["access_key", "secret_key"], "aws")

        assert exc_info.value.missing_keys == ["secret_key"]
        assert exc_info.value.provider == "aws"

    def test_empty_value_is_missing(self) -> None:
        """Test empty strings count as missing."""
        with pytest.raises(InvalidCredentialError):
            require_credential_keys({"access_key": ""}, ["access_key"], "aws")

    def test_all_present(self) -> None:
        """Test complete maps pass."""
        require_credential_keys({"a": "1", "b": "2"}, ["a", "b"], "aws")
