"""HTTP strategy backed by the OSRM table service."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Sequence

import httpx

from ...config import settings
from ...exceptions import RoutingEngineError
from ...models.domain import DistanceMethod, DistanceResult, GeoPoint
from .base import DistanceMatrix, DistanceStrategy

logger = logging.getLogger(__name__)

# Two points in central Dhaka, used to probe the table service.
HEALTH_PROBE_COORDINATES = "90.4125,23.8103;90.2792,23.7808"


class OSRMStrategy(DistanceStrategy):
    """Road distances from ``/table/v1``.

    One HTTP request per call, bounded by ``timeout`` seconds end to end. Any
    failure is raised as ``RoutingEngineError``. No retries.
    """

    name = "osrm"
    method = DistanceMethod.REMOTE

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self._transport = transport

    def _get_client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            transport=self._transport,
        )

    def _build_request(
        self, origins: Sequence[GeoPoint], destinations: Sequence[GeoPoint]
    ) -> tuple[str, dict[str, str]]:
        coordinate_str = ";".join(point.as_lon_lat() for point in (*origins, *destinations))
        sources = range(len(origins))
        targets = range(len(origins), len(origins) + len(destinations))
        params = {
            "annotations": "distance,duration",
            "sources": ";".join(str(i) for i in sources),
            "destinations": ";".join(str(i) for i in targets),
        }
        url = f"{self.base_url}/table/v1/{self.profile}/{coordinate_str}"
        return url, params

    async def _fetch_table(self, url: str, params: dict[str, str]) -> dict:
        async with self._get_client(self.timeout) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()

    async def calculate(
        self,
        origins: Sequence[GeoPoint],
        destinations: Sequence[GeoPoint],
    ) -> DistanceMatrix:
        if not origins or not destinations:
            raise ValueError("At least one origin and one destination are required for OSRM table.")

        url, params = self._build_request(origins, destinations)
        try:
            data = await asyncio.wait_for(self._fetch_table(url, params), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise RoutingEngineError(f"OSRM request timed out after {self.timeout:g}s") from exc
        except httpx.HTTPStatusError as exc:
            raise RoutingEngineError(
                f"OSRM API error: {exc.response.status_code} {exc.response.reason_phrase}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise RoutingEngineError(f"OSRM request timed out after {self.timeout:g}s") from exc
        except (httpx.ConnectError, httpx.NetworkError) as exc:
            raise RoutingEngineError(
                f"Failed to connect to OSRM service at {self.base_url}: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RoutingEngineError(f"OSRM calculation failed: {exc}") from exc
        except ValueError as exc:
            # response.json() on a non-JSON body
            raise RoutingEngineError("Invalid response format from OSRM service") from exc

        return self._parse_table(data, origins, destinations)

    def _parse_table(
        self,
        data: Any,
        origins: Sequence[GeoPoint],
        destinations: Sequence[GeoPoint],
    ) -> DistanceMatrix:
        if not isinstance(data, dict):
            raise RoutingEngineError("Invalid response format from OSRM service")
        code = data.get("code")
        if code != "Ok":
            raise RoutingEngineError(f"OSRM API error: {data.get('message') or code}")

        distances = _checked_matrix(data.get("distances"), len(origins), len(destinations))
        if distances is None:
            raise RoutingEngineError("OSRM response missing or malformed distances.")
        # Durations are optional; a malformed block is dropped rather than trusted.
        durations = _checked_matrix(data.get("durations"), len(origins), len(destinations))

        matrix: DistanceMatrix = []
        for i, origin in enumerate(origins):
            row: list[DistanceResult] = []
            for j, destination in enumerate(destinations):
                row.append(
                    DistanceResult(
                        origin=origin,
                        destination=destination,
                        distance_km=distances[i][j] / 1000.0,
                        duration_seconds=durations[i][j] if durations is not None else None,
                        method=self.method,
                    )
                )
            matrix.append(row)
        return matrix

    async def is_available(self) -> bool:
        return await check_health(self.base_url, self.profile, transport=self._transport)


def _checked_matrix(value: Any, rows: int, cols: int) -> list[list[float]] | None:
    """Return ``value`` if it is a ``rows`` x ``cols`` grid of finite non-negative numbers."""

    if not isinstance(value, list) or len(value) != rows:
        return None
    for row in value:
        if not isinstance(row, list) or len(row) != cols:
            return None
        for cell in row:
            if isinstance(cell, bool) or not isinstance(cell, (int, float)):
                return None
            if not math.isfinite(cell) or cell < 0:
                return None
    return value


async def check_health(
    base_url: str | None = None,
    profile: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Check OSRM service health by making a minimal table request.

    Public OSRM endpoints have no /health route, so connectivity is tested
    with a two-coordinate table call.
    """
    base = (base_url or settings.osrm_base_url).rstrip("/")
    if not base:
        return False
    url = f"{base}/table/v1/{profile or settings.osrm_profile}/{HEALTH_PROBE_COORDINATES}"
    try:
        async with httpx.AsyncClient(
            timeout=settings.osrm_health_timeout_seconds, transport=transport
        ) as client:
            response = await client.get(url, params={"annotations": "distance"})
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.info("OSRM health probe failed: %s", exc)
        return False
    return isinstance(data, dict) and data.get("code") == "Ok" and isinstance(data.get("distances"), list)
