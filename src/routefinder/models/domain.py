"""Domain models for stops, route placements and distance results."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional

from ..exceptions import InvalidInputError

Direction = Literal["outbound", "inbound"]


class DistanceMethod(str, Enum):
    """Provenance of a distance value."""

    REMOTE = "remote"
    GEOMETRIC = "geometric"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    def validate(self) -> "GeoPoint":
        lat, lon = self.latitude, self.longitude
        if not (isinstance(lat, (int, float)) and isinstance(lon, (int, float))):
            raise InvalidInputError(f"Invalid coordinates: lat={lat}, lng={lon}")
        if math.isnan(lat) or math.isnan(lon) or math.isinf(lat) or math.isinf(lon):
            raise InvalidInputError(f"Invalid coordinates: lat={lat}, lng={lon}")
        if lat < -90 or lat > 90:
            raise InvalidInputError(f"Invalid latitude: {lat}. Must be between -90 and 90.")
        if lon < -180 or lon > 180:
            raise InvalidInputError(f"Invalid longitude: {lon}. Must be between -180 and 180.")
        return self

    def as_lon_lat(self) -> str:
        """OSRM coordinate order."""
        return f"{self.longitude},{self.latitude}"


@dataclass(frozen=True, slots=True)
class DistanceResult:
    """Distance between one origin and one destination."""

    origin: GeoPoint
    destination: GeoPoint
    distance_km: float
    method: DistanceMethod
    duration_seconds: Optional[float] = None


@dataclass(frozen=True, slots=True)
class Stop:
    """A bus stop as stored in the ``stops`` table."""

    id: str
    name: str
    location: GeoPoint
    accessible: bool = False


@dataclass(frozen=True, slots=True)
class RouteStopPlacement:
    """Position of a stop on a bus route for one direction."""

    bus_id: str
    stop_id: str
    stop_order: int
    direction: Direction
    stop: Optional[Stop] = None


@dataclass(frozen=True, slots=True)
class Bus:
    id: str
    name: str
    status: Optional[str] = None


@dataclass(slots=True)
class NearestStop:
    """Best candidate stop with the threshold decision attached."""

    stop: Stop
    distance_km: float
    method: DistanceMethod
    within_threshold: bool
    threshold_km: float
    stop_order: Optional[int] = None
    duration_seconds: Optional[float] = None


@dataclass(slots=True)
class StopWithDistance:
    stop: Stop
    distance_m: float
    method: DistanceMethod


@dataclass(slots=True)
class JourneySegment:
    from_order: int
    to_order: int
    from_stop_id: str
    to_stop_id: str
    result: DistanceResult


@dataclass(slots=True)
class JourneyLength:
    """Accumulated distance between a boarding and an alighting stop."""

    bus_id: str
    direction: Direction
    boarding_order: int
    alighting_order: int
    total_distance_km: float
    total_duration_seconds: float
    low_confidence: bool
    duration_estimated: bool
    segments: list[JourneySegment] = field(default_factory=list)


@dataclass(slots=True)
class BusRoute:
    """A bus that serves the onboarding stop before the offboarding stop."""

    bus: Bus
    direction: Direction
    onboarding_stop: Stop
    offboarding_stop: Stop
    onboarding_order: int
    offboarding_order: int
    journey: Optional[JourneyLength] = None
