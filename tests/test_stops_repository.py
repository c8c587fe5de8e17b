from types import SimpleNamespace

import pytest

from routefinder.cache import TTLCache
from routefinder.data.stops_repository import StopRepository
from routefinder.exceptions import StorageUnavailableError
from routefinder.models.domain import GeoPoint
from routefinder.services.distance import DistanceResolver
from routefinder.services.stops.nearest import find_nearest_stop

STOP_ROWS = [
    {"id": "S1", "name": "Farmgate", "latitude": 23.7561, "longitude": 90.3872, "accessible": True},
    {"id": "S2", "name": "Karwan Bazar", "latitude": "23.7509", "longitude": "90.3935"},
    {"id": "S3", "name": "Broken", "latitude": None, "longitude": 90.4},
]

ROUTE_ROWS = [
    {"bus_id": "B1", "stop_id": "S2", "stop_order": 2, "direction": "outbound", "stops": STOP_ROWS[1]},
    {"bus_id": "B1", "stop_id": "S1", "stop_order": 1, "direction": "outbound", "stops": STOP_ROWS[0]},
]


class FakeQuery:
    """Records the supabase query builder chain and returns canned rows."""

    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self.client = client
        self.table = table
        self.filters: list[tuple] = []

    def select(self, columns, **kwargs):
        self.filters.append(("select", columns))
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, tuple(values)))
        return self

    def order(self, column):
        self.filters.append(("order", column))
        return self

    def execute(self):
        self.client.executed.append((self.table, self.filters))
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.rows.get(self.table, []))


class FakeSupabase:
    def __init__(self, rows: dict, error: Exception | None = None) -> None:
        self.rows = rows
        self.error = error
        self.executed: list[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.mark.anyio
async def test_list_stops_parses_rows_and_skips_invalid_ones():
    repository = StopRepository(FakeSupabase({"stops": STOP_ROWS}))

    stops = await repository.list_stops()

    assert [stop.id for stop in stops] == ["S1", "S2"]
    assert stops[0].accessible is True
    assert stops[1].location.latitude == pytest.approx(23.7509)


@pytest.mark.anyio
async def test_list_stops_is_served_from_cache():
    client = FakeSupabase({"stops": STOP_ROWS})
    repository = StopRepository(client, TTLCache(default_ttl=60))

    first = await repository.list_stops()
    second = await repository.list_stops()

    assert first == second
    assert len(client.executed) == 1


@pytest.mark.anyio
async def test_route_placements_are_filtered_and_ordered():
    client = FakeSupabase({"route_stops": ROUTE_ROWS})
    repository = StopRepository(client)

    placements = await repository.get_route_placements("B1", "outbound")

    assert [p.stop_order for p in placements] == [1, 2]
    assert placements[0].stop.name == "Farmgate"
    _, filters = client.executed[0]
    assert ("eq", "bus_id", "B1") in filters
    assert ("eq", "direction", "outbound") in filters
    assert ("order", "stop_order") in filters


@pytest.mark.anyio
async def test_placements_for_stops_collects_active_buses():
    rows = [
        {**row, "buses": {"id": "B1", "name": "Bus 1", "status": "active"}} for row in ROUTE_ROWS
    ]
    client = FakeSupabase({"route_stops": rows})
    repository = StopRepository(client)

    placements, buses = await repository.get_placements_for_stops(["S1", "S2"])

    assert len(placements) == 2
    assert list(buses) == ["B1"]
    assert buses["B1"].name == "Bus 1"
    _, filters = client.executed[0]
    assert ("in", "stop_id", ("S1", "S2")) in filters
    assert ("eq", "buses.status", "active") in filters


@pytest.mark.anyio
async def test_unconfigured_client_raises_storage_unavailable():
    with pytest.raises(StorageUnavailableError):
        await StopRepository(None).list_stops()


@pytest.mark.anyio
async def test_query_failure_raises_storage_unavailable():
    repository = StopRepository(FakeSupabase({}, error=RuntimeError("connection reset")))

    with pytest.raises(StorageUnavailableError, match="connection reset"):
        await repository.get_route_placements("B1", "inbound")


@pytest.mark.anyio
async def test_out_of_range_stored_stop_is_skipped_and_lookup_succeeds(road_strategy):
    rows = [STOP_ROWS[0], {"id": "S9", "name": "Misplaced", "latitude": 95.0, "longitude": 90.387}]
    repository = StopRepository(FakeSupabase({"stops": rows}))

    stops = await repository.list_stops()
    nearest = await find_nearest_stop(
        GeoPoint(23.756, 90.387), stops, DistanceResolver(primary=road_strategy)
    )

    assert [stop.id for stop in stops] == ["S1"]
    assert nearest.stop.id == "S1"


@pytest.mark.anyio
async def test_route_placement_with_invalid_embedded_stop_is_skipped():
    bad = {**ROUTE_ROWS[0], "stops": {**STOP_ROWS[1], "longitude": 181.0}}
    repository = StopRepository(FakeSupabase({"route_stops": [bad, ROUTE_ROWS[1]]}))

    placements = await repository.get_route_placements("B1", "outbound")

    assert [p.stop_id for p in placements] == ["S1"]
