"""Shared driver helpers."""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from kubeorch.core.config import KubeorchConfig
from kubeorch.interfaces.cluster_driver import ClusterDriver

T = TypeVar("T")


class BaseDriver(ClusterDriver):
    """Common plumbing for SDK-backed drivers."""

    def __init__(self, config: KubeorchConfig | None = None):
        self.config = config or KubeorchConfig()

    @staticmethod
    async def _run(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking SDK call in a worker thread."""
        return await asyncio.to_thread(fn, *args, **kwargs)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a provider timestamp (datetime or RFC 3339 string)."""
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
