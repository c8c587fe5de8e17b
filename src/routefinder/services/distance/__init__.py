"""Distance strategies and the resolver that composes them."""

from .base import DistanceMatrix, DistanceStrategy
from .haversine import HaversineStrategy
from .osrm import OSRMStrategy, check_health
from .resolver import DistanceResolver

__all__ = [
    "DistanceMatrix",
    "DistanceResolver",
    "DistanceStrategy",
    "HaversineStrategy",
    "OSRMStrategy",
    "check_health",
]
