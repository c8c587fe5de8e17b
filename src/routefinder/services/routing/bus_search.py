"""Find buses that travel from one stop to another."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from ...data.stops_repository import StopRepository
from ...exceptions import InvalidInputError, InvalidRouteRangeError, StopNotFoundError
from ...models.domain import BusRoute, RouteStopPlacement
from ..distance import DistanceResolver
from .journey import accumulate_journey

logger = logging.getLogger(__name__)


def match_routes(
    placements: list[RouteStopPlacement],
    onboarding_stop_id: str,
    offboarding_stop_id: str,
) -> list[tuple[RouteStopPlacement, RouteStopPlacement]]:
    """Pairs (onboarding, offboarding) per bus and direction where boarding comes first."""

    grouped: dict[tuple[str, str], list[RouteStopPlacement]] = defaultdict(list)
    for placement in placements:
        grouped[(placement.bus_id, placement.direction)].append(placement)

    matches = []
    for group in grouped.values():
        onboarding = next((p for p in group if p.stop_id == onboarding_stop_id), None)
        offboarding = next((p for p in group if p.stop_id == offboarding_stop_id), None)
        if onboarding is None or offboarding is None:
            continue
        if onboarding.stop is None or offboarding.stop is None:
            continue
        if onboarding.stop_order < offboarding.stop_order:
            matches.append((onboarding, offboarding))
    return matches


async def find_bus_routes(
    onboarding_stop_id: str,
    offboarding_stop_id: str,
    repository: StopRepository,
    resolver: DistanceResolver,
) -> list[BusRoute]:
    if onboarding_stop_id == offboarding_stop_id:
        raise InvalidInputError("Onboarding and offboarding stops must differ.")

    placements, buses = await repository.get_placements_for_stops(
        [onboarding_stop_id, offboarding_stop_id]
    )
    matches = [
        (on, off)
        for on, off in match_routes(placements, onboarding_stop_id, offboarding_stop_id)
        if on.bus_id in buses
    ]

    async def _build(on: RouteStopPlacement, off: RouteStopPlacement) -> BusRoute:
        route = BusRoute(
            bus=buses[on.bus_id],
            direction=on.direction,
            onboarding_stop=on.stop,
            offboarding_stop=off.stop,
            onboarding_order=on.stop_order,
            offboarding_order=off.stop_order,
        )
        full_route = await repository.get_route_placements(on.bus_id, on.direction)
        try:
            route.journey = await accumulate_journey(
                full_route, on.stop_order, off.stop_order, resolver
            )
        except (InvalidRouteRangeError, StopNotFoundError) as exc:
            logger.warning(
                "Journey length unavailable for bus %s (%s): %s",
                on.bus_id,
                on.direction,
                exc,
                extra={"bus_id": on.bus_id},
            )
        return route

    routes = await asyncio.gather(*(_build(on, off) for on, off in matches))
    return sorted(
        routes,
        key=lambda r: (r.journey is None, r.journey.total_distance_km if r.journey else 0.0),
    )
