"""Cheap geometric ranking used to bound OSRM calls."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import GeoPoint, Stop
from ..geospatial import point_distance_km


def rank_candidates(
    reference: GeoPoint,
    stops: Sequence[Stop],
    limit: int | None = None,
) -> list[tuple[Stop, float]]:
    """Return up to ``limit`` stops nearest to ``reference`` by straight-line distance.

    Pairs are ``(stop, haversine_km)`` in ascending distance; ``sorted`` is
    stable, so equal distances keep their input order. This is a heuristic: a
    stop that is farther in a straight line can be closer by road, and such a
    stop may be cut here.
    """
    cap = settings.max_osrm_candidates if limit is None else limit
    if cap < 1:
        raise ValueError("Candidate limit must be at least 1.")
    ranked = sorted(
        ((stop, point_distance_km(reference, stop.location)) for stop in stops),
        key=lambda pair: pair[1],
    )
    return ranked[:cap]


def clamp_threshold_km(
    value: Optional[float],
    default: float | None = None,
    minimum: float | None = None,
    maximum: float | None = None,
) -> float:
    """Missing or non-positive thresholds use the default; others are clamped."""

    default = settings.default_threshold_km if default is None else default
    minimum = settings.min_threshold_km if minimum is None else minimum
    maximum = settings.max_threshold_km if maximum is None else maximum
    if value is None or not math.isfinite(value) or value <= 0:
        value = default
    return min(max(value, minimum), maximum)
