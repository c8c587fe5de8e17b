"""Health endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from supabase import Client

from ...services.distance import check_health as osrm_health_check
from ..deps import get_supabase_client

router = APIRouter(tags=["health"])

@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}

@router.get("/health/osrm", status_code=status.HTTP_200_OK)
async def health_osrm() -> dict:
    """Check OSRM service health.

    An unhealthy routing engine does not break distance lookups; they fall back
    to straight-line distances.
    """
    healthy = await osrm_health_check()
    return {"service": "osrm", "healthy": healthy, "fallback": "haversine"}

@router.get("/health/database", status_code=status.HTTP_200_OK)
async def check_database(supabase: Optional[Client] = Depends(get_supabase_client)) -> dict:
    """Check Supabase configuration and whether the stops table answers."""
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set BRF_SUPABASE_URL and BRF_SUPABASE_KEY environment variables.",
        }

    try:
        response = await run_in_threadpool(
            lambda: supabase.table("stops").select("id", count="exact").limit(1).execute()
        )
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "configured": True,
        "connected": True,
        "stops_count": response.count,
        "message": f"Database connected. Found {response.count} stops.",
    }
