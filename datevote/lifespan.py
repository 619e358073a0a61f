"""Application startup and shutdown.

The only long-lived resource is the database connection pool; everything else
is created per request.
"""

import logging
from dataclasses import dataclass

from datevote import db
from datevote.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    db_enabled: bool = False


async def init_database() -> bool:
    """Open the connection pool and apply pending migrations.

    Returns:
        True if the pool was opened, False if the database is disabled.
    """
    if not get_settings().features.database:
        logger.info("Database disabled (ENABLE_DB=0)")
        return False
    await db.init_pool()
    return True


async def setup_resources() -> LifespanResources:
    resources = LifespanResources()
    resources.db_enabled = await init_database()
    return resources


async def cleanup_resources(resources: LifespanResources) -> None:
    if resources.db_enabled:
        await db.close_pool()
        resources.db_enabled = False
