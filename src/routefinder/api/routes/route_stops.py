"""Endpoints that work on a single bus route."""

from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from ...data.stops_repository import StopRepository
from ...exceptions import StopNotFoundError
from ...models.domain import GeoPoint
from ...schemas.routing import JourneyLengthResponse
from ...schemas.stops import ClosestStopResponse
from ...services.distance import DistanceResolver
from ...services.routing.journey import accumulate_journey
from ...services.stops.nearest import find_nearest_stop
from ..deps import get_resolver, get_stop_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/route-stops", tags=["route-stops"])


@router.get("/closest", response_model=ClosestStopResponse, status_code=status.HTTP_200_OK)
async def closest_stop(
    bus_id: str = Query(..., min_length=1),
    latitude: float = Query(...),
    longitude: float = Query(...),
    direction: Literal["outbound", "inbound"] = Query(default="outbound"),
    max_km: Optional[float] = Query(default=None, description="Threshold in km, clamped to the configured range."),
    repository: StopRepository = Depends(get_stop_repository),
    resolver: DistanceResolver = Depends(get_resolver),
) -> ClosestStopResponse:
    """Nearest stop of a bus route to a GPS fix.

    Always answers with the nearest stop; ``within_threshold`` tells whether it
    is inside ``max_km``.
    """
    reference = GeoPoint(latitude, longitude).validate()
    placements = await repository.get_route_placements(bus_id, direction)
    stops = [p.stop for p in placements if p.stop is not None]
    if not stops:
        raise StopNotFoundError(f"No stops found for bus {bus_id} ({direction}).")

    nearest = await find_nearest_stop(
        reference,
        stops,
        resolver,
        threshold_km=max_km,
        stop_orders={p.stop_id: p.stop_order for p in placements},
    )
    logger.info(
        "Closest stop for bus %s: %s at %.3f km (%s, within_threshold=%s)",
        bus_id,
        nearest.stop.id,
        nearest.distance_km,
        nearest.method.value,
        nearest.within_threshold,
    )
    return ClosestStopResponse.from_nearest(nearest)


@router.get("/journey-length", response_model=JourneyLengthResponse, status_code=status.HTTP_200_OK)
async def journey_length(
    bus_id: str = Query(..., min_length=1),
    onboarding_order: int = Query(..., ge=0),
    offboarding_order: int = Query(..., ge=0),
    direction: Literal["outbound", "inbound"] = Query(...),
    repository: StopRepository = Depends(get_stop_repository),
    resolver: DistanceResolver = Depends(get_resolver),
) -> JourneyLengthResponse:
    placements = await repository.get_route_placements(bus_id, direction)
    journey = await accumulate_journey(placements, onboarding_order, offboarding_order, resolver)
    logger.info(
        "Journey length for bus %s %d->%d: %.3f km (low_confidence=%s)",
        bus_id,
        onboarding_order,
        offboarding_order,
        journey.total_distance_km,
        journey.low_confidence,
    )
    return JourneyLengthResponse.from_domain(journey)
