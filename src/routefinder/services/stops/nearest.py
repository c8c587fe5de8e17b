"""Nearest-stop selection."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from ...exceptions import StopNotFoundError
from ...models.domain import GeoPoint, NearestStop, Stop
from ..distance import DistanceResolver
from .candidates import clamp_threshold_km, rank_candidates

logger = logging.getLogger(__name__)


async def find_nearest_stop(
    reference: GeoPoint,
    stops: Sequence[Stop],
    resolver: DistanceResolver,
    threshold_km: Optional[float] = None,
    candidate_limit: int | None = None,
    stop_orders: Mapping[str, int] | None = None,
) -> NearestStop:
    """Pick the closest stop to ``reference`` and flag whether it is within range.

    An out-of-range nearest stop is still returned; ``within_threshold`` lets the
    caller decide what to do with it.
    """
    reference.validate()
    if not stops:
        raise StopNotFoundError("No stops available for nearest-stop lookup.")

    limit_km = clamp_threshold_km(threshold_km)
    candidates = [stop for stop, _ in rank_candidates(reference, stops, candidate_limit)]

    matrix = await resolver.resolve(
        [reference], [stop.location for stop in candidates], allow_fallback=True
    )
    results = matrix[0]
    best_index = min(range(len(candidates)), key=lambda i: results[i].distance_km)
    best = results[best_index]
    stop = candidates[best_index]

    logger.debug(
        "Nearest stop %s at %.3f km (%s) from %d candidates",
        stop.id,
        best.distance_km,
        best.method.value,
        len(candidates),
    )
    return NearestStop(
        stop=stop,
        distance_km=best.distance_km,
        method=best.method,
        within_threshold=best.distance_km <= limit_km,
        threshold_km=limit_km,
        stop_order=(stop_orders or {}).get(stop.id),
        duration_seconds=best.duration_seconds,
    )
