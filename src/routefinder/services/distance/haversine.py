"""Great-circle distance strategy.

Works offline and never fails for valid input. It does not produce
durations: callers that need one estimate it from a fixed average speed and
must present it as an approximation.
"""

from __future__ import annotations

from typing import Sequence

from ...models.domain import DistanceMethod, DistanceResult, GeoPoint
from ..geospatial import point_distance_km
from .base import DistanceMatrix, DistanceStrategy


class HaversineStrategy(DistanceStrategy):
    name = "haversine"
    method = DistanceMethod.GEOMETRIC

    async def calculate(
        self,
        origins: Sequence[GeoPoint],
        destinations: Sequence[GeoPoint],
    ) -> DistanceMatrix:
        return [
            [
                DistanceResult(
                    origin=origin,
                    destination=destination,
                    distance_km=point_distance_km(origin, destination),
                    method=self.method,
                )
                for destination in destinations
            ]
            for origin in origins
        ]
