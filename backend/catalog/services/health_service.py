import os
import time

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.config import settings

APP_VERSION = os.environ.get("APP_VERSION", "dev")


async def check_database(db: AsyncSession) -> dict:
    """Check database connectivity and measure latency."""
    try:
        start = time.monotonic()
        await db.execute(text("SELECT 1"))
        latency_ms = round((time.monotonic() - start) * 1000)
        return {"status": "up", "latency_ms": latency_ms}
    except Exception:
        return {"status": "down"}


def check_image_host() -> dict:
    if not settings.cloudinary_configured:
        return {"status": "not_configured"}
    return {"status": "configured"}


async def get_health(db: AsyncSession) -> tuple[dict, int]:
    """Returns (response_body, status_code)."""
    checks = {
        "database": await check_database(db),
        "image_host": check_image_host(),
    }
    overall = "healthy" if checks["database"]["status"] == "up" else "unhealthy"
    status_code = 200 if overall == "healthy" else 503
    return {"status": overall, "version": APP_VERSION, "checks": checks}, status_code
