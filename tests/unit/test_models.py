"""Unit tests for core data models."""

import pytest
from pydantic import ValidationError

from kubeorch.core.models import (
    ClusterInfo,
    ClusterSpec,
    Credential,
    DeleteResult,
    NetworkSpec,
    NodeGroupSpec,
    NodePoolSpec,
    Operation,
    Provider,
    Taint,
    TaintEffect,
)


class TestEnums:
    """Tests for enums."""

    def test_provider_values(self) -> None:
        """Test provider identifiers."""
        assert [p.value for p in Provider] == ["aws", "gcp", "azure", "ncp"]

    def test_operation_from_value(self) -> None:
        """Test operations can be built from their string value."""
        assert Operation("get_kubeconfig") is Operation.GET_KUBECONFIG
        assert len(Operation) == 9

    def test_taint_default_effect(self) -> None:
        """Test taints default to NoSchedule."""
        assert Taint(key="k").effect == TaintEffect.NO_SCHEDULE
        assert Taint(key="k", effect="NoExecute").effect == TaintEffect.NO_EXECUTE


class TestClusterSpec:
    """Tests for ClusterSpec."""

    def test_required_fields(self) -> None:
        """Test name, version and region are required."""
        with pytest.raises(ValidationError) as exc_info:
            ClusterSpec(name="c")

        assert "version" in str(exc_info.value)
        assert "region" in str(exc_info.value)

    def test_defaults(self) -> None:
        """Test optional blocks default to absent."""
        spec = ClusterSpec(name="c", version="1.29", region="r1")

        assert spec.zone is None
        assert spec.network is None
        assert spec.node_pool is None
        assert spec.autopilot is False
        assert spec.tags == {}

    def test_nested_from_dict(self) -> None:
        """Test nested blocks parse from plain dicts."""
        spec = ClusterSpec(
            name="c",
            version="1.29",
            region="r1",
            network={"vpc_id": "v", "subnet_ids": ["s"]},
            node_pool={"name": "p", "machine_type": "e2-medium", "taints": [{"key": "k"}]},
        )

        assert isinstance(spec.network, NetworkSpec)
        assert isinstance(spec.node_pool, NodePoolSpec)
        assert spec.node_pool.disk_size_gb == 100
        assert spec.node_pool.taints[0].key == "k"

    def test_network_requires_vpc(self) -> None:
        """Test vpc_id is required."""
        with pytest.raises(ValidationError):
            NetworkSpec()


class TestNodeGroupSpec:
    """Tests for NodeGroupSpec."""

    def test_defaults(self) -> None:
        """Test scaling defaults to zero bounds."""
        spec = NodeGroupSpec(cluster_name="c", name="n", region="r1")

        assert spec.scaling.min_size == 0
        assert spec.scaling.max_size == 0
        assert spec.instance_types == []


class TestCredential:
    """Tests for Credential."""

    def test_repr_hides_blob(self) -> None:
        """Test the encrypted blob is not shown."""
        credential = Credential(provider="aws", encrypted_data=b"super-secret-bytes")

        text = repr(credential)

        assert "super-secret-bytes" not in text
        assert "18 bytes" in text
        assert "aws" in text


class TestResults:
    """Tests for result models."""

    def test_cluster_info_zone_defaults_empty(self) -> None:
        """Test region-scoped clusters have an empty zone."""
        info = ClusterInfo(id="i", name="n", region="r1")

        assert info.zone == ""
        assert info.created_at is None

    def test_delete_result_default_status(self) -> None:
        """Test deletes are reported as accepted."""
        assert DeleteResult(name="n", region="r1").status == "deleting"

    def test_cluster_info_json_dump(self) -> None:
        """Test results serialize to JSON-compatible dicts."""
        data = ClusterInfo(id="i", name="n", region="r1", tags={"a": "b"}).model_dump(mode="json")

        assert data["tags"] == {"a": "b"}
        assert data["network"] is None
