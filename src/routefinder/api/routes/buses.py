"""Bus search endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ...data.stops_repository import StopRepository
from ...schemas.routing import BetweenStopsResponse, BusRouteModel
from ...services.distance import DistanceResolver
from ...services.routing.bus_search import find_bus_routes
from ..deps import get_resolver, get_stop_repository

router = APIRouter(prefix="/buses", tags=["buses"])


@router.get("/between-stops", response_model=BetweenStopsResponse, status_code=status.HTTP_200_OK)
async def buses_between_stops(
    onboarding_stop_id: str = Query(..., min_length=1),
    offboarding_stop_id: str = Query(..., min_length=1),
    repository: StopRepository = Depends(get_stop_repository),
    resolver: DistanceResolver = Depends(get_resolver),
) -> BetweenStopsResponse:
    routes = await find_bus_routes(onboarding_stop_id, offboarding_stop_id, repository, resolver)
    return BetweenStopsResponse(
        onboarding_stop_id=onboarding_stop_id,
        offboarding_stop_id=offboarding_stop_id,
        count=len(routes),
        buses=[BusRouteModel.from_domain(route) for route in routes],
    )
