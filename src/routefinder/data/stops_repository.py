"""Read-only access to stops and route placements stored in Supabase."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Sequence

from fastapi.concurrency import run_in_threadpool
from supabase import Client

from ..cache import TTLCache
from ..exceptions import InvalidInputError, StorageUnavailableError
from ..models.domain import Bus, GeoPoint, RouteStopPlacement, Stop

logger = logging.getLogger(__name__)

STOP_COLUMNS = "id, name, latitude, longitude, accessible"
PLACEMENT_COLUMNS = f"bus_id, stop_id, stop_order, direction, stops ({STOP_COLUMNS})"


def _stop_from_row(row: dict[str, Any]) -> Stop:
    return Stop(
        id=str(row["id"]),
        name=str(row.get("name") or row["id"]),
        location=GeoPoint(float(row["latitude"]), float(row["longitude"])).validate(),
        accessible=bool(row.get("accessible", False)),
    )


def _placement_from_row(row: dict[str, Any]) -> RouteStopPlacement:
    stop_row = row.get("stops")
    return RouteStopPlacement(
        bus_id=str(row["bus_id"]),
        stop_id=str(row["stop_id"]),
        stop_order=int(row["stop_order"]),
        direction=row["direction"],
        stop=_stop_from_row(stop_row) if isinstance(stop_row, dict) else None,
    )


def _bus_from_row(row: dict[str, Any]) -> Bus:
    return Bus(id=str(row["id"]), name=str(row.get("name") or row["id"]), status=row.get("status"))


def _parse_rows(rows: Iterable[dict[str, Any]], parser: Callable[[dict[str, Any]], Any], label: str) -> list:
    parsed = []
    for row in rows:
        try:
            parsed.append(parser(row))
        except (KeyError, ValueError, TypeError, InvalidInputError) as e:
            # Skip invalid rows but continue processing
            logger.warning("Skipping invalid %s row: %s", label, e)
    return parsed


class StopRepository:
    """Stop and route queries with results memoised in a shared ``TTLCache``."""

    def __init__(self, client: Optional[Client], cache: Optional[TTLCache] = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else TTLCache(default_ttl=0)

    def _require_client(self) -> Client:
        if self.client is None:
            raise StorageUnavailableError(
                "Supabase not configured. Set BRF_SUPABASE_URL and BRF_SUPABASE_KEY environment variables."
            )
        return self.client

    async def _query(self, label: str, run: Callable[[Client], Any]) -> list[dict[str, Any]]:
        client = self._require_client()
        try:
            response = await run_in_threadpool(run, client)
        except Exception as exc:
            logger.error("Supabase query for %s failed: %s", label, exc)
            raise StorageUnavailableError(f"Failed to fetch {label}: {exc}") from exc
        return list(response.data or [])

    async def list_stops(self) -> tuple[Stop, ...]:
        key = ("stops",)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        rows = await self._query(
            "stops", lambda client: client.table("stops").select(STOP_COLUMNS).execute()
        )
        stops = tuple(_parse_rows(rows, _stop_from_row, "stop"))
        self.cache.set(key, stops)
        return stops

    async def get_route_placements(self, bus_id: str, direction: str) -> tuple[RouteStopPlacement, ...]:
        """Placements for one bus and direction, ordered by ``stop_order``, with stop details."""
        key = ("route_stops", bus_id, direction)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        rows = await self._query(
            "route stops",
            lambda client: client.table("route_stops")
            .select(PLACEMENT_COLUMNS)
            .eq("bus_id", bus_id)
            .eq("direction", direction)
            .order("stop_order")
            .execute(),
        )
        placements = tuple(
            sorted(_parse_rows(rows, _placement_from_row, "route stop"), key=lambda p: p.stop_order)
        )
        self.cache.set(key, placements)
        return placements

    async def get_placements_for_stops(
        self, stop_ids: Sequence[str]
    ) -> tuple[list[RouteStopPlacement], dict[str, Bus]]:
        """Placements touching any of ``stop_ids`` on active buses, plus those buses by id."""
        key = ("route_stops_by_stop", tuple(sorted(stop_ids)))
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        rows = await self._query(
            "bus routes",
            lambda client: client.table("route_stops")
            .select(f"{PLACEMENT_COLUMNS}, buses!inner (id, name, status)")
            .in_("stop_id", list(stop_ids))
            .eq("buses.status", "active")
            .execute(),
        )
        placements = _parse_rows(rows, _placement_from_row, "route stop")
        buses: dict[str, Bus] = {}
        for row in rows:
            bus_row = row.get("buses")
            if isinstance(bus_row, dict):
                for bus in _parse_rows([bus_row], _bus_from_row, "bus"):
                    buses[bus.id] = bus
        result = (placements, buses)
        self.cache.set(key, result)
        return result
