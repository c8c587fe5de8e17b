"""Stop discovery endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...data.stops_repository import StopRepository
from ...models.domain import GeoPoint
from ...schemas.stops import (
    ClosestStopResponse,
    LocationModel,
    NearbyStopModel,
    WithinThresholdResponse,
)
from ...services.distance import DistanceResolver
from ...services.stops.discovery import discover_stops
from ...services.stops.nearest import find_nearest_stop
from ..deps import get_resolver, get_stop_repository

router = APIRouter(prefix="/stops", tags=["stops"])


@router.get("/nearest", response_model=ClosestStopResponse, status_code=status.HTTP_200_OK)
async def nearest_stop(
    latitude: float = Query(...),
    longitude: float = Query(...),
    max_km: Optional[float] = Query(default=None),
    repository: StopRepository = Depends(get_stop_repository),
    resolver: DistanceResolver = Depends(get_resolver),
) -> ClosestStopResponse:
    reference = GeoPoint(latitude, longitude).validate()
    stops = await repository.list_stops()
    nearest = await find_nearest_stop(reference, stops, resolver, threshold_km=max_km)
    return ClosestStopResponse.from_nearest(nearest)


@router.get("/within-threshold", response_model=WithinThresholdResponse, status_code=status.HTTP_200_OK)
async def stops_within_threshold(
    lat: float = Query(...),
    lng: float = Query(...),
    threshold: float = Query(..., description="Maximum distance in meters."),
    repository: StopRepository = Depends(get_stop_repository),
    resolver: DistanceResolver = Depends(get_resolver),
) -> WithinThresholdResponse:
    location = GeoPoint(lat, lng).validate()
    stops = await repository.list_stops()
    found = await discover_stops(location, stops, threshold, resolver)
    return WithinThresholdResponse(
        stops=[NearbyStopModel.from_discovery(item) for item in found],
        count=len(found),
        threshold=threshold,
        location=LocationModel(lat=lat, lng=lng),
    )
