"""Error taxonomy for distance resolution and stop lookups."""

from __future__ import annotations


class RouteFinderError(Exception):
    """Base exception for the route finder service."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(RouteFinderError):
    """Raised when coordinates, lists or query parameters are malformed."""

    code = "INVALID_INPUT"
    status_code = 400


class InvalidRouteRangeError(InvalidInputError):
    """Raised when a boarding/alighting order pair is not a valid range on the route."""

    code = "INVALID_ROUTE_RANGE"


class StopNotFoundError(RouteFinderError):
    """Raised when no stops exist for the requested bus or area."""

    code = "STOP_NOT_FOUND"
    status_code = 404


class UpstreamUnavailableError(RouteFinderError):
    """Raised when the routing engine failed and fallback was not allowed."""

    code = "UPSTREAM_UNAVAILABLE"
    status_code = 503


class DistanceUnavailableError(RouteFinderError):
    """Raised when both the routing engine and the geometric fallback failed."""

    code = "DISTANCE_UNAVAILABLE"
    status_code = 503


class StorageUnavailableError(RouteFinderError):
    """Raised when Supabase is not configured or a query fails."""

    code = "STORAGE_UNAVAILABLE"
    status_code = 503


class RoutingEngineError(Exception):
    """Raised by the OSRM strategy for any failed or malformed table request.

    Never surfaces to HTTP clients: the resolver converts it into the
    geometric fallback or into ``UpstreamUnavailableError``.
    """
