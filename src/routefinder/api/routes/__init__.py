"""Route group exports."""

from . import buses, distance, health, route_stops, stops

__all__ = ["buses", "distance", "health", "route_stops", "stops"]
