from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from datevote import db

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, Any]:
    database = "healthy" if await db.ping() else "unhealthy"
    return {
        "status": "ok",
        "database": database,
        "pool": db.get_pool_stats(),
        "timestamp": datetime.now(UTC).isoformat(),
    }
