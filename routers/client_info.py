"""
Client info endpoint: what the server sees of the caller.

Used by the embed script to stamp analytics events with the same IP the
submission endpoint will record.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from utils.client_identity import client_ip
from utils.limiter import limiter
from utils.settings import get_settings

router = APIRouter(prefix="/api", tags=["client"])


@router.get("/client-info")
@limiter.limit(get_settings().DASHBOARD_RATE_LIMIT)
async def client_info(request: Request):
    return {
        "ipAddress": client_ip(request, extra_headers=("x-client-ip",)),
        "userAgent": request.headers.get("user-agent") or "unknown",
        "referrer": request.headers.get("referer") or "direct",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
