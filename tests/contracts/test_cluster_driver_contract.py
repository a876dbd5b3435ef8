"""Contract tests for the ClusterDriver interface.

All ClusterDriver implementations must pass these tests to ensure
substitutability behind the orchestrator.
"""

import inspect
from unittest.mock import MagicMock

import pytest

from kubeorch.core.exceptions import (
    InvalidScalingConfigError,
    MissingNetworkConfigError,
    UnsupportedOperationError,
)
from kubeorch.core.models import (
    ClusterRef,
    ClusterSpec,
    NodeGroupSpec,
    Operation,
    ScalingConfig,
)
from kubeorch.drivers.eks_driver import EKSDriver
from kubeorch.drivers.gke_driver import GKEDriver
from kubeorch.drivers.unimplemented import UnimplementedDriver
from kubeorch.interfaces.cluster_driver import ClusterDriver


class ClusterDriverContract:
    """Base contract tests for ClusterDriver."""

    @pytest.fixture
    def driver(self) -> ClusterDriver:
        """Subclass must provide concrete ClusterDriver implementation."""
        raise NotImplementedError("Subclass must implement driver fixture")

    @pytest.fixture
    def credentials(self) -> dict:
        """Subclass must provide a complete credential map."""
        raise NotImplementedError("Subclass must implement credentials fixture")

    def test_driver_has_provider(self, driver: ClusterDriver):
        """Driver must name its provider."""
        assert isinstance(driver.provider, str)
        assert len(driver.provider) > 0

    def test_supported_operations_are_operations(self, driver: ClusterDriver):
        """supported_operations must be a subset of Operation."""
        assert driver.supported_operations <= frozenset(Operation)

    def test_every_operation_is_a_coroutine(self, driver: ClusterDriver):
        """Each operation must be an async method."""
        for operation in Operation:
            assert inspect.iscoroutinefunction(getattr(driver, operation.value))


class ImplementedDriverContract(ClusterDriverContract):
    """Contract for drivers backed by a real provider."""

    def test_supports_every_operation(self, driver: ClusterDriver):
        """Implemented drivers must support every operation."""
        assert driver.supported_operations == frozenset(Operation)

    @pytest.mark.asyncio
    async def test_missing_network_rejected(self, driver: ClusterDriver, credentials: dict):
        """A spec without network must fail before any provider call."""
        spec = ClusterSpec(name="c", version="1.29", region="r1")

        with pytest.raises(MissingNetworkConfigError):
            await driver.create_cluster(credentials, spec)

    @pytest.mark.asyncio
    async def test_invalid_scaling_rejected(self, driver: ClusterDriver, credentials: dict):
        """Inconsistent node group bounds must fail before any provider call."""
        spec = NodeGroupSpec(
            cluster_name="c",
            name="n",
            region="r1",
            scaling=ScalingConfig(min_size=5, max_size=3, desired_size=4),
        )

        with pytest.raises(InvalidScalingConfigError):
            await driver.create_node_group(credentials, spec)


class TestEKSDriverContract(ImplementedDriverContract):
    """EKSDriver satisfies the contract."""

    @pytest.fixture
    def driver(self) -> ClusterDriver:
        return EKSDriver(client_factory=MagicMock(side_effect=AssertionError("no client")))

    @pytest.fixture
    def credentials(self, aws_credentials: dict) -> dict:
        return aws_credentials


class TestGKEDriverContract(ImplementedDriverContract):
    """GKEDriver satisfies the contract."""

    @pytest.fixture
    def driver(self) -> ClusterDriver:
        return GKEDriver(client_factory=MagicMock(side_effect=AssertionError("no client")))

    @pytest.fixture
    def credentials(self, gcp_credentials: dict) -> dict:
        return gcp_credentials


class TestUnimplementedDriverContract(ClusterDriverContract):
    """Stub drivers satisfy the base contract and refuse every call."""

    @pytest.fixture
    def driver(self) -> ClusterDriver:
        return UnimplementedDriver("azure")

    @pytest.fixture
    def credentials(self) -> dict:
        return {}

    @pytest.mark.asyncio
    async def test_calls_raise(self, driver: ClusterDriver, credentials: dict):
        """Every call must raise UnsupportedOperationError."""
        with pytest.raises(UnsupportedOperationError):
            await driver.get_kubeconfig(credentials, ClusterRef(name="c", region="r1"))
