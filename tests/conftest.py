import asyncio
from typing import Sequence

import pytest

from routefinder.exceptions import RoutingEngineError
from routefinder.models.domain import DistanceMethod, DistanceResult, GeoPoint
from routefinder.services.distance import DistanceStrategy
from routefinder.services.geospatial import point_distance_km


class RoadStrategy(DistanceStrategy):
    """Stand-in for OSRM: road distance is the straight line times ``factor``."""

    name = "road"
    method = DistanceMethod.REMOTE

    def __init__(self, factor: float = 1.3, speed_mps: float = 10.0) -> None:
        self.factor = factor
        self.speed_mps = speed_mps
        self.calls: list[tuple[list[GeoPoint], list[GeoPoint]]] = []

    async def calculate(self, origins: Sequence[GeoPoint], destinations: Sequence[GeoPoint]):
        self.calls.append((list(origins), list(destinations)))
        matrix = []
        for origin in origins:
            row = []
            for destination in destinations:
                km = point_distance_km(origin, destination) * self.factor
                row.append(
                    DistanceResult(
                        origin=origin,
                        destination=destination,
                        distance_km=km,
                        duration_seconds=km * 1000 / self.speed_mps,
                        method=self.method,
                    )
                )
            matrix.append(row)
        return matrix


class DownStrategy(DistanceStrategy):
    name = "down"
    method = DistanceMethod.REMOTE

    def __init__(self) -> None:
        self.calls = 0

    async def calculate(self, origins, destinations):
        self.calls += 1
        raise RoutingEngineError("OSRM request timed out after 30s")


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def road_strategy() -> RoadStrategy:
    return RoadStrategy()


@pytest.fixture()
def down_strategy() -> DownStrategy:
    return DownStrategy()


class FlakyStrategy(RoadStrategy):
    """Road distances, except for calls that include ``broken_destination``."""

    def __init__(self, broken_destination: GeoPoint) -> None:
        super().__init__()
        self.broken_destination = broken_destination

    async def calculate(self, origins, destinations):
        if self.broken_destination in destinations:
            raise RoutingEngineError("OSRM returned HTTP 502")
        return await super().calculate(origins, destinations)


@pytest.fixture()
def flaky_strategy():
    return FlakyStrategy


class SlowStrategy(RoadStrategy):
    """Road distances after a short sleep, tracking how many calls overlap."""

    def __init__(self, delay: float = 0.01) -> None:
        super().__init__()
        self.delay = delay
        self.in_flight = 0
        self.peak = 0

    async def calculate(self, origins, destinations):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return await super().calculate(origins, destinations)
        finally:
            self.in_flight -= 1


@pytest.fixture()
def slow_strategy() -> SlowStrategy:
    return SlowStrategy()
