"""Distance request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import DistanceResult, GeoPoint


class CoordinateModel(BaseModel):
    lat: float
    lng: float

    def to_point(self) -> GeoPoint:
        return GeoPoint(latitude=self.lat, longitude=self.lng)


class DistanceRequest(BaseModel):
    origins: List[CoordinateModel]
    destinations: List[CoordinateModel]
    allow_fallback: bool = Field(
        default=True,
        description="Fall back to straight-line distances when the routing engine fails.",
    )


class DistanceResultModel(BaseModel):
    distance_km: float
    duration_seconds: Optional[float] = None
    method: Literal["remote", "geometric"]

    @classmethod
    def from_domain(cls, result: DistanceResult) -> "DistanceResultModel":
        return cls(
            distance_km=result.distance_km,
            duration_seconds=result.duration_seconds,
            method=result.method.value,
        )


class DistanceResponse(BaseModel):
    method: Literal["remote", "geometric"]
    rows: List[List[DistanceResultModel]]
