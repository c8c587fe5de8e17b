"""Journey length between two stop orders on one bus route."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from ...config import settings
from ...exceptions import InvalidRouteRangeError, StopNotFoundError
from ...models.domain import (
    DistanceMethod,
    JourneyLength,
    JourneySegment,
    RouteStopPlacement,
)
from ..distance import DistanceResolver
from ..geospatial import estimate_duration_seconds

logger = logging.getLogger(__name__)


def select_range(
    placements: Sequence[RouteStopPlacement],
    boarding_order: int,
    alighting_order: int,
) -> list[RouteStopPlacement]:
    """Placements from boarding to alighting inclusive, ordered by ``stop_order``."""

    if boarding_order >= alighting_order:
        raise InvalidRouteRangeError(
            f"Onboarding order ({boarding_order}) must come before offboarding order ({alighting_order})."
        )
    orders = {placement.stop_order for placement in placements}
    missing = [order for order in (boarding_order, alighting_order) if order not in orders]
    if missing:
        raise InvalidRouteRangeError(
            f"Stop order(s) {', '.join(str(order) for order in missing)} not found on this route."
        )
    return sorted(
        (p for p in placements if boarding_order <= p.stop_order <= alighting_order),
        key=lambda p: p.stop_order,
    )


async def accumulate_journey(
    placements: Sequence[RouteStopPlacement],
    boarding_order: int,
    alighting_order: int,
    resolver: DistanceResolver,
    average_speed_kmh: float | None = None,
) -> JourneyLength:
    """Sum consecutive-pair distances from ``boarding_order`` to ``alighting_order``.

    Every adjacent pair whose lower order is >= boarding and whose upper order
    is <= alighting contributes once. Pairs are resolved concurrently and each
    may fall back on its own; the total is marked ``low_confidence`` when any
    of them did.
    """
    in_range = select_range(placements, boarding_order, alighting_order)
    for placement in in_range:
        if placement.stop is None:
            raise StopNotFoundError(
                f"Stop details missing for stop {placement.stop_id} (order {placement.stop_order})."
            )

    pairs = list(zip(in_range, in_range[1:]))
    results = await asyncio.gather(
        *(resolver.resolve_pair(a.stop.location, b.stop.location) for a, b in pairs)
    )

    speed = average_speed_kmh or settings.average_bus_speed_kmh
    segments: list[JourneySegment] = []
    total_km = 0.0
    total_seconds = 0.0
    duration_estimated = False
    for (a, b), result in zip(pairs, results):
        segments.append(
            JourneySegment(
                from_order=a.stop_order,
                to_order=b.stop_order,
                from_stop_id=a.stop_id,
                to_stop_id=b.stop_id,
                result=result,
            )
        )
        total_km += result.distance_km
        if result.duration_seconds is None:
            duration_estimated = True
            total_seconds += estimate_duration_seconds(result.distance_km, speed)
        else:
            total_seconds += result.duration_seconds

    low_confidence = any(s.result.method is DistanceMethod.GEOMETRIC for s in segments)
    if low_confidence:
        logger.info(
            "Journey %s/%s %d->%d used geometric distances for some segments",
            in_range[0].bus_id,
            in_range[0].direction,
            boarding_order,
            alighting_order,
        )

    return JourneyLength(
        bus_id=in_range[0].bus_id,
        direction=in_range[0].direction,
        boarding_order=boarding_order,
        alighting_order=alighting_order,
        total_distance_km=total_km,
        total_duration_seconds=total_seconds,
        low_confidence=low_confidence,
        duration_estimated=duration_estimated,
        segments=segments,
    )
