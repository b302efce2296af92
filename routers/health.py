import logging

from fastapi import APIRouter

from db.database import ping

router = APIRouter()
logger = logging.getLogger("forms.health")


@router.get("/health/db")
async def health_db():
    """Lightweight DB health check: runs SELECT 1."""
    try:
        await ping()
        return {"status": "ok", "db": True}
    except Exception as e:
        # Do not leak internals; the cause goes to the log only
        logger.warning("database health check failed: %s", e)
        return {"status": "fail", "db": False}
