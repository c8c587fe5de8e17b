"""FastAPI dependencies shared by the route modules."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from supabase import Client, create_client

from ..cache import TTLCache
from ..config import settings
from ..data.stops_repository import StopRepository
from ..services.distance import DistanceResolver

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Optional[Client]:
    """Process-wide Supabase client, or ``None`` when credentials are missing.

    Stops and routes are only ever read, so the anon key is enough. Creating
    the client does not touch the network; failures surface on the first
    query as ``StorageUnavailableError``.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured; stop lookups will return 503")
        return None
    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as exc:
        logger.error("Failed to create Supabase client for %s: %s", settings.supabase_url, exc)
        return None


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


def get_resolver(request: Request) -> DistanceResolver:
    return request.app.state.resolver


def get_stop_repository(
    cache: TTLCache = Depends(get_cache),
    client: Optional[Client] = Depends(get_supabase_client),
) -> StopRepository:
    return StopRepository(client, cache)
