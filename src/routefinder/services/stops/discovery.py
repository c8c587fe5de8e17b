"""Discover stops within a walking threshold of a location."""

from __future__ import annotations

from typing import Sequence

from ...config import settings
from ...exceptions import InvalidInputError
from ...models.domain import GeoPoint, Stop, StopWithDistance
from ..distance import DistanceResolver
from .candidates import rank_candidates


def validate_threshold_m(threshold_m: float) -> float:
    low, high = settings.min_discovery_threshold_m, settings.max_discovery_threshold_m
    if not (low <= threshold_m <= high):
        raise InvalidInputError(
            f"Threshold must be a number between {low:.0f} and {high:.0f} meters"
        )
    return threshold_m


async def discover_stops(
    location: GeoPoint,
    stops: Sequence[Stop],
    threshold_m: float,
    resolver: DistanceResolver,
    candidate_limit: int | None = None,
) -> list[StopWithDistance]:
    """Stops whose resolved distance is within ``threshold_m``, nearest first.

    Road distance is never shorter than the great-circle distance, so stops
    already beyond the threshold in a straight line are dropped before the
    OSRM call.
    """
    location.validate()
    validate_threshold_m(threshold_m)
    threshold_km = threshold_m / 1000.0
    limit = settings.max_discovery_candidates if candidate_limit is None else candidate_limit

    candidates = [
        stop
        for stop, straight_km in rank_candidates(location, stops, limit)
        if straight_km <= threshold_km
    ]
    if not candidates:
        return []

    matrix = await resolver.resolve([location], [stop.location for stop in candidates])
    found = [
        StopWithDistance(stop=stop, distance_m=result.distance_km * 1000.0, method=result.method)
        for stop, result in zip(candidates, matrix[0])
        if result.distance_km <= threshold_km
    ]
    found.sort(key=lambda item: item.distance_m)
    return found
