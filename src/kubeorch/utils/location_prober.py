"""Multi-location discovery for providers without uniform addressing.

A regional name like ``us-central1`` may refer to a regional resource or to a
zonal one in ``us-central1-a``/``-b``/``-c``. The prober derives the candidate
list from configuration and supports two access patterns:

* point lookup: try candidates in order and stop at the first hit
* enumeration: query every candidate and merge the results
"""

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from kubeorch.core.config import LocationConfig
from kubeorch.core.exceptions import NotFoundAnyLocationError, ProviderAPIError
from kubeorch.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class ProbeResult(Generic[T]):
    """Outcome of a successful point lookup."""

    location: str
    value: T
    attempted: list[str] = field(default_factory=list)


@dataclass
class LocatedItem(Generic[T]):
    """An enumerated item tagged with the location it was found at."""

    location: str
    value: T


class LocationProber:
    """Resolve resources across a region and its zones."""

    def __init__(self, provider: str, config: LocationConfig | None = None):
        """Initialize prober.

        Args:
            provider: Provider identifier, used in logs and errors
            config: Location configuration (zone suffixes, parallelism)
        """
        self.provider = provider
        self.config = config or LocationConfig()

    def candidates(self, region: str) -> list[str]:
        """Return candidate locations for a region, region first."""
        return [region] + [f"{region}-{suffix}" for suffix in self.config.zone_suffixes]

    async def probe(
        self,
        region: str,
        resource: str,
        lookup: Callable[[str], Awaitable[T]],
    ) -> ProbeResult[T]:
        """Find a resource by trying candidate locations in order.

        Args:
            region: Region to derive candidates from
            resource: Resource name, used in logs and errors
            lookup: Coroutine function called with each candidate location

        Returns:
            ProbeResult for the first location whose lookup succeeded

        Raises:
            NotFoundAnyLocationError: If every candidate lookup failed
        """
        attempted: list[str] = []
        errors: dict[str, str] = {}

        for location in self.candidates(region):
            attempted.append(location)
            try:
                value = await lookup(location)
            except Exception as e:
                errors[location] = str(e)
                logger.debug(
                    "location_probe_miss",
                    provider=self.provider,
                    resource=resource,
                    location=location,
                    error=str(e),
                )
                continue

            logger.debug(
                "location_probe_hit",
                provider=self.provider,
                resource=resource,
                location=location,
                attempts=len(attempted),
            )
            return ProbeResult(location=location, value=value, attempted=attempted)

        logger.warning(
            "location_probe_exhausted",
            provider=self.provider,
            resource=resource,
            region=region,
            attempted=attempted,
        )
        raise NotFoundAnyLocationError(resource, region, attempted, errors)

    async def enumerate(
        self,
        region: str,
        lister: Callable[[str], Awaitable[list[T]]],
        key: Callable[[T], Hashable],
        operation: str = "list",
    ) -> list[LocatedItem[T]]:
        """Query every candidate location and merge the results.

        Failed locations are logged and skipped. Items are de-duplicated by
        ``key``; the first location (in candidate order) that reported an item
        wins.

        Args:
            region: Region to derive candidates from
            lister: Coroutine function returning the items at a location
            key: Identity function used for de-duplication
            operation: Operation name for logs and errors

        Returns:
            Merged items, in candidate order

        Raises:
            ProviderAPIError: If every candidate location failed
        """
        locations = self.candidates(region)

        if self.config.parallel_enumeration:
            outcomes = await asyncio.gather(
                *(lister(location) for location in locations), return_exceptions=True
            )
        else:
            outcomes = []
            for location in locations:
                try:
                    outcomes.append(await lister(location))
                except Exception as e:
                    outcomes.append(e)

        merged: list[LocatedItem[T]] = []
        seen: set[Hashable] = set()
        failures: dict[str, str] = {}

        for location, outcome in zip(locations, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                failures[location] = str(outcome)
                logger.warning(
                    "location_enumeration_failed",
                    provider=self.provider,
                    operation=operation,
                    location=location,
                    error=str(outcome),
                )
                continue
            for item in outcome:
                item_key = key(item)
                if item_key in seen:
                    continue
                seen.add(item_key)
                merged.append(LocatedItem(location=location, value=item))

        if len(failures) == len(locations):
            raise ProviderAPIError(
                f"all candidate locations failed: {failures}",
                provider=self.provider,
                operation=operation,
                location=region,
            )

        logger.debug(
            "location_enumeration_completed",
            provider=self.provider,
            operation=operation,
            region=region,
            count=len(merged),
            failed_locations=sorted(failures),
        )
        return merged
