"""Distance matrix endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...schemas.distance import DistanceRequest, DistanceResponse, DistanceResultModel
from ...services.distance import DistanceResolver
from ..deps import get_resolver

router = APIRouter(prefix="/distance", tags=["distance"])


@router.post("", response_model=DistanceResponse, status_code=status.HTTP_200_OK)
async def calculate_distances(
    payload: DistanceRequest,
    resolver: DistanceResolver = Depends(get_resolver),
) -> DistanceResponse:
    matrix = await resolver.resolve(
        [origin.to_point() for origin in payload.origins],
        [destination.to_point() for destination in payload.destinations],
        allow_fallback=payload.allow_fallback,
    )
    return DistanceResponse(
        method=matrix[0][0].method.value,
        rows=[[DistanceResultModel.from_domain(result) for result in row] for row in matrix],
    )
