import pytest

from routefinder.exceptions import InvalidInputError, StopNotFoundError
from routefinder.models.domain import DistanceMethod, GeoPoint, Stop
from routefinder.services.distance import DistanceResolver
from routefinder.services.stops.discovery import discover_stops
from routefinder.services.stops.nearest import find_nearest_stop

ORIGIN = GeoPoint(23.8103, 90.4125)


def _stop(sid: str, lat: float, lon: float) -> Stop:
    return Stop(id=sid, name=f"Stop {sid}", location=GeoPoint(lat, lon))


def _stops_north(count: int, step: float = 0.002) -> list[Stop]:
    return [_stop(f"S{i}", 23.8103 + step * i, 90.4125) for i in range(1, count + 1)]


@pytest.mark.anyio
async def test_nearest_stop_within_threshold(road_strategy):
    stops = _stops_north(5)
    resolver = DistanceResolver(primary=road_strategy)

    nearest = await find_nearest_stop(ORIGIN, stops, resolver, threshold_km=1.0)

    assert nearest.stop.id == "S1"
    assert nearest.method is DistanceMethod.REMOTE
    assert nearest.within_threshold is True
    assert nearest.threshold_km == pytest.approx(1.0)
    assert nearest.distance_km <= nearest.threshold_km


@pytest.mark.anyio
async def test_out_of_range_nearest_stop_is_still_returned(road_strategy):
    far_stops = [_stop("FAR1", 24.2, 90.4125), _stop("FAR2", 24.5, 90.4125)]
    resolver = DistanceResolver(primary=road_strategy)

    nearest = await find_nearest_stop(ORIGIN, far_stops, resolver, threshold_km=50)

    assert nearest.stop.id == "FAR1"
    assert nearest.threshold_km == pytest.approx(10.0)
    assert nearest.within_threshold is False


@pytest.mark.anyio
async def test_only_top_k_candidates_reach_the_routing_engine(road_strategy):
    stops = list(reversed(_stops_north(25)))
    resolver = DistanceResolver(primary=road_strategy)

    await find_nearest_stop(ORIGIN, stops, resolver, candidate_limit=10)

    (origins, destinations), = road_strategy.calls
    assert origins == [ORIGIN]
    assert destinations == [stop.location for stop in _stops_north(10)]


@pytest.mark.anyio
async def test_nearest_stop_uses_fallback_and_reports_method(down_strategy):
    stops = _stops_north(3)
    resolver = DistanceResolver(primary=down_strategy)

    nearest = await find_nearest_stop(
        ORIGIN, stops, resolver, stop_orders={"S1": 4, "S2": 5, "S3": 6}
    )

    assert nearest.stop.id == "S1"
    assert nearest.method is DistanceMethod.GEOMETRIC
    assert nearest.stop_order == 4
    assert nearest.threshold_km == pytest.approx(1.5)


@pytest.mark.anyio
async def test_nearest_stop_requires_candidates(road_strategy):
    with pytest.raises(StopNotFoundError):
        await find_nearest_stop(ORIGIN, [], DistanceResolver(primary=road_strategy))


@pytest.mark.anyio
async def test_discover_stops_filters_by_resolved_distance(road_strategy):
    # 0.002 degrees of latitude is ~222 m; road factor 1.3 makes it ~289 m.
    stops = _stops_north(6)
    resolver = DistanceResolver(primary=road_strategy)

    found = await discover_stops(ORIGIN, stops, 600, resolver)

    assert [item.stop.id for item in found] == ["S1", "S2"]
    assert all(item.method is DistanceMethod.REMOTE for item in found)
    assert found[0].distance_m < found[1].distance_m
    # S3..S6 straight-line distances exceed 600 m and never reach the engine.
    (_, destinations), = road_strategy.calls
    assert len(destinations) == 2


@pytest.mark.anyio
async def test_discover_stops_returns_empty_without_calling_engine(road_strategy):
    stops = [_stop("FAR", 24.5, 90.4125)]

    found = await discover_stops(ORIGIN, stops, 500, DistanceResolver(primary=road_strategy))

    assert found == []
    assert road_strategy.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize("threshold", [50, 5001])
async def test_discover_stops_rejects_threshold_out_of_range(road_strategy, threshold):
    with pytest.raises(InvalidInputError):
        await discover_stops(ORIGIN, _stops_north(2), threshold, DistanceResolver(primary=road_strategy))
