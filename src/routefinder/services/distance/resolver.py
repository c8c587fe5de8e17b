"""Remote-first distance resolution with a geometric fallback."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from ...config import settings
from ...exceptions import (
    DistanceUnavailableError,
    InvalidInputError,
    UpstreamUnavailableError,
)
from ...models.domain import DistanceResult, GeoPoint
from .base import DistanceMatrix, DistanceStrategy
from .haversine import HaversineStrategy
from .osrm import OSRMStrategy

logger = logging.getLogger(__name__)


def validate_points(points: Sequence[GeoPoint], label: str) -> list[GeoPoint]:
    if not points:
        raise InvalidInputError(f"At least one {label} is required.")
    return [point.validate() for point in points]


class DistanceResolver:
    """Resolve a distance matrix with the primary strategy, falling back once.

    Every result carries the ``method`` of the strategy that produced it, so a
    matrix is either entirely remote or entirely geometric. At most
    ``max_parallel_requests`` primary calls run at once across all callers
    sharing this resolver; the rest wait their turn.
    """

    def __init__(
        self,
        primary: DistanceStrategy | None = None,
        fallback: DistanceStrategy | None = None,
        max_parallel_requests: int | None = None,
    ) -> None:
        self.primary = primary or OSRMStrategy()
        self.fallback = fallback or HaversineStrategy()
        self.max_parallel_requests = (
            max_parallel_requests
            if max_parallel_requests is not None
            else settings.max_concurrent_osrm_requests
        )
        if self.max_parallel_requests < 1:
            raise ValueError("max_parallel_requests must be at least 1")
        self._primary_slots = asyncio.Semaphore(self.max_parallel_requests)

    async def resolve(
        self,
        origins: Sequence[GeoPoint],
        destinations: Sequence[GeoPoint],
        allow_fallback: bool = True,
    ) -> DistanceMatrix:
        origins = validate_points(origins, "origin")
        destinations = validate_points(destinations, "destination")

        try:
            async with self._primary_slots:
                return await self.primary.calculate(origins, destinations)
        except Exception as exc:
            if not allow_fallback:
                raise UpstreamUnavailableError(
                    f"Routing engine ({self.primary.name}) unavailable: {exc}"
                ) from exc
            logger.warning(
                "Primary distance strategy %s failed, falling back to %s: %s",
                self.primary.name,
                self.fallback.name,
                exc,
                extra={"strategy": self.primary.name, "fallback": self.fallback.name},
            )

        try:
            return await self.fallback.calculate(origins, destinations)
        except Exception as exc:
            logger.error(
                "Fallback distance strategy %s failed: %s",
                self.fallback.name,
                exc,
                extra={"strategy": self.fallback.name},
            )
            raise DistanceUnavailableError(
                f"Distance could not be computed by {self.primary.name} or {self.fallback.name}."
            ) from exc

    async def resolve_pair(
        self, origin: GeoPoint, destination: GeoPoint, allow_fallback: bool = True
    ) -> DistanceResult:
        matrix = await self.resolve([origin], [destination], allow_fallback=allow_fallback)
        return matrix[0][0]
