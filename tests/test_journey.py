from dataclasses import replace

import pytest

from routefinder.exceptions import InvalidRouteRangeError, StopNotFoundError
from routefinder.models.domain import DistanceMethod, GeoPoint, RouteStopPlacement, Stop
from routefinder.services.distance import DistanceResolver
from routefinder.services.geospatial import point_distance_km
from routefinder.services.routing.journey import accumulate_journey, select_range

POINTS = [
    GeoPoint(23.8103, 90.4125),
    GeoPoint(23.8200, 90.4125),
    GeoPoint(23.8300, 90.4200),
    GeoPoint(23.8400, 90.4300),
]


def _route(points=POINTS, first_order: int = 0) -> list[RouteStopPlacement]:
    return [
        RouteStopPlacement(
            bus_id="B1",
            stop_id=f"S{i}",
            stop_order=first_order + i,
            direction="outbound",
            stop=Stop(id=f"S{i}", name=f"Stop {i}", location=point),
        )
        for i, point in enumerate(points)
    ]


@pytest.mark.anyio
async def test_three_stop_journey_sums_both_pairs(road_strategy):
    resolver = DistanceResolver(primary=road_strategy)

    journey = await accumulate_journey(_route(POINTS[:3]), 0, 2, resolver)

    expected = (
        point_distance_km(POINTS[0], POINTS[1]) + point_distance_km(POINTS[1], POINTS[2])
    ) * road_strategy.factor
    assert journey.total_distance_km == pytest.approx(expected)
    assert [(s.from_order, s.to_order) for s in journey.segments] == [(0, 1), (1, 2)]
    assert journey.low_confidence is False
    assert journey.duration_estimated is False
    assert journey.total_duration_seconds == pytest.approx(expected * 1000 / road_strategy.speed_mps)


@pytest.mark.anyio
async def test_partial_range_ignores_pairs_outside_it(road_strategy):
    resolver = DistanceResolver(primary=road_strategy)

    journey = await accumulate_journey(_route(first_order=1), 2, 3, resolver)

    assert [(s.from_stop_id, s.to_stop_id) for s in journey.segments] == [("S1", "S2")]
    assert journey.total_distance_km == pytest.approx(
        point_distance_km(POINTS[1], POINTS[2]) * road_strategy.factor
    )


@pytest.mark.anyio
async def test_unordered_placements_are_sorted_by_stop_order(road_strategy):
    resolver = DistanceResolver(primary=road_strategy)
    ordered = await accumulate_journey(_route(), 0, 3, resolver)
    shuffled = await accumulate_journey(list(reversed(_route())), 0, 3, resolver)

    assert shuffled.total_distance_km == pytest.approx(ordered.total_distance_km)


@pytest.mark.anyio
async def test_one_fallback_segment_marks_journey_low_confidence(flaky_strategy):
    strategy = flaky_strategy(broken_destination=POINTS[2])
    resolver = DistanceResolver(primary=strategy)

    journey = await accumulate_journey(_route(), 0, 3, resolver)

    methods = [s.result.method for s in journey.segments]
    assert methods == [DistanceMethod.REMOTE, DistanceMethod.GEOMETRIC, DistanceMethod.REMOTE]
    assert journey.low_confidence is True
    # The geometric segment has no duration, so it is estimated from bus speed.
    assert journey.duration_estimated is True
    assert journey.total_distance_km == pytest.approx(
        sum(s.result.distance_km for s in journey.segments)
    )


@pytest.mark.anyio
async def test_fallback_durations_use_average_bus_speed(down_strategy):
    resolver = DistanceResolver(primary=down_strategy)

    journey = await accumulate_journey(_route(POINTS[:2]), 0, 1, resolver, average_speed_kmh=30.0)

    km = point_distance_km(POINTS[0], POINTS[1])
    assert journey.total_distance_km == pytest.approx(km)
    assert journey.total_duration_seconds == pytest.approx(km / 30.0 * 3600)


@pytest.mark.anyio
@pytest.mark.parametrize(("boarding", "alighting"), [(2, 2), (3, 1), (0, 9), (7, 8)])
async def test_invalid_ranges_raise(road_strategy, boarding, alighting):
    with pytest.raises(InvalidRouteRangeError):
        await accumulate_journey(_route(), boarding, alighting, DistanceResolver(primary=road_strategy))
    assert road_strategy.calls == []


@pytest.mark.anyio
async def test_missing_stop_details_raise_not_found(road_strategy):
    route = _route()
    route[1] = replace(route[1], stop=None)

    with pytest.raises(StopNotFoundError):
        await accumulate_journey(route, 0, 2, DistanceResolver(primary=road_strategy))


def test_select_range_is_inclusive():
    selected = select_range(_route(), 1, 3)
    assert [p.stop_order for p in selected] == [1, 2, 3]


@pytest.mark.anyio
async def test_long_route_keeps_routing_engine_calls_bounded(slow_strategy):
    points = [GeoPoint(23.70 + 0.002 * i, 90.40) for i in range(60)]
    resolver = DistanceResolver(primary=slow_strategy, max_parallel_requests=4)

    journey = await accumulate_journey(_route(points), 0, 59, resolver)

    assert len(journey.segments) == 59
    assert len(slow_strategy.calls) == 59
    assert slow_strategy.peak == 4
    assert journey.low_confidence is False
