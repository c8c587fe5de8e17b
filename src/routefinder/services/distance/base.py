"""Base classes for distance strategy implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...models.domain import DistanceMethod, DistanceResult, GeoPoint

DistanceMatrix = list[list[DistanceResult]]


class DistanceStrategy(ABC):
    """Contract for distance strategy implementations.

    Rows of the returned matrix follow ``origins`` and columns follow
    ``destinations``.
    """

    name: str
    method: DistanceMethod

    @abstractmethod
    async def calculate(
        self,
        origins: Sequence[GeoPoint],
        destinations: Sequence[GeoPoint],
    ) -> DistanceMatrix:
        raise NotImplementedError

    async def is_available(self) -> bool:
        return True
