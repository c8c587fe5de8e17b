"""Stop lookup response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel

from ..models.domain import NearestStop, Stop, StopWithDistance


class StopModel(BaseModel):
    id: str
    name: str
    latitude: float
    longitude: float
    accessible: bool = False

    @classmethod
    def from_domain(cls, stop: Stop) -> "StopModel":
        return cls(
            id=stop.id,
            name=stop.name,
            latitude=stop.location.latitude,
            longitude=stop.location.longitude,
            accessible=stop.accessible,
        )


class ClosestStopResponse(StopModel):
    distance_km: float
    duration_seconds: Optional[float] = None
    stop_order: Optional[int] = None
    method: Literal["remote", "geometric"]
    within_threshold: bool
    threshold_km: float

    @classmethod
    def from_nearest(cls, nearest: NearestStop) -> "ClosestStopResponse":
        return cls(
            **StopModel.from_domain(nearest.stop).model_dump(),
            distance_km=nearest.distance_km,
            duration_seconds=nearest.duration_seconds,
            stop_order=nearest.stop_order,
            method=nearest.method.value,
            within_threshold=nearest.within_threshold,
            threshold_km=nearest.threshold_km,
        )


class NearbyStopModel(StopModel):
    distance_m: float
    method: Literal["remote", "geometric"]

    @classmethod
    def from_discovery(cls, item: StopWithDistance) -> "NearbyStopModel":
        return cls(
            **StopModel.from_domain(item.stop).model_dump(),
            distance_m=item.distance_m,
            method=item.method.value,
        )


class LocationModel(BaseModel):
    lat: float
    lng: float


class WithinThresholdResponse(BaseModel):
    stops: List[NearbyStopModel]
    count: int
    threshold: float
    location: LocationModel
