"""Journey and bus search response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import BusRoute, JourneyLength
from .stops import StopModel


class JourneySegmentModel(BaseModel):
    from_order: int
    to_order: int
    from_stop_id: str
    to_stop_id: str
    distance_km: float
    duration_seconds: Optional[float] = None
    method: Literal["remote", "geometric"]


class JourneyLengthResponse(BaseModel):
    bus_id: str
    direction: Literal["outbound", "inbound"]
    onboarding_order: int
    offboarding_order: int
    journey_length_km: float
    journey_length_meters: float
    estimated_duration_minutes: float
    duration_estimated: bool = Field(
        description="True when some segment durations were derived from the average bus speed."
    )
    low_confidence: bool = Field(
        description="True when any segment distance came from the straight-line fallback."
    )
    segments: List[JourneySegmentModel]

    @classmethod
    def from_domain(cls, journey: JourneyLength) -> "JourneyLengthResponse":
        return cls(
            bus_id=journey.bus_id,
            direction=journey.direction,
            onboarding_order=journey.boarding_order,
            offboarding_order=journey.alighting_order,
            journey_length_km=journey.total_distance_km,
            journey_length_meters=journey.total_distance_km * 1000.0,
            estimated_duration_minutes=journey.total_duration_seconds / 60.0,
            duration_estimated=journey.duration_estimated,
            low_confidence=journey.low_confidence,
            segments=[
                JourneySegmentModel(
                    from_order=segment.from_order,
                    to_order=segment.to_order,
                    from_stop_id=segment.from_stop_id,
                    to_stop_id=segment.to_stop_id,
                    distance_km=segment.result.distance_km,
                    duration_seconds=segment.result.duration_seconds,
                    method=segment.result.method.value,
                )
                for segment in journey.segments
            ],
        )


class BusRouteModel(BaseModel):
    bus_id: str
    bus_name: str
    direction: Literal["outbound", "inbound"]
    onboarding_stop: StopModel
    offboarding_stop: StopModel
    onboarding_order: int
    offboarding_order: int
    journey_length_km: Optional[float] = None
    low_confidence: Optional[bool] = None

    @classmethod
    def from_domain(cls, route: BusRoute) -> "BusRouteModel":
        return cls(
            bus_id=route.bus.id,
            bus_name=route.bus.name,
            direction=route.direction,
            onboarding_stop=StopModel.from_domain(route.onboarding_stop),
            offboarding_stop=StopModel.from_domain(route.offboarding_stop),
            onboarding_order=route.onboarding_order,
            offboarding_order=route.offboarding_order,
            journey_length_km=route.journey.total_distance_km if route.journey else None,
            low_confidence=route.journey.low_confidence if route.journey else None,
        )


class BetweenStopsResponse(BaseModel):
    onboarding_stop_id: str
    offboarding_stop_id: str
    count: int
    buses: List[BusRouteModel]
