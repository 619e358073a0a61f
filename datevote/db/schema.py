"""Schema bootstrap run when the pool opens.

Pending migrations are applied, then the unique constraints that the
date catalog and the response recorder depend on are looked up. Without them
concurrent submissions could create the same day twice, so startup fails
instead of serving requests.
"""

import logging

from datevote.db.core import _get_connection
from datevote.db.migrations import get_current_version, run_migrations

logger = logging.getLogger(__name__)

REQUIRED_CONSTRAINTS = (
    "ux_event_dates_event_day",
    "ux_date_availabilities_response_date",
    "ux_users_email",
    "ux_users_google_id",
)


async def missing_constraints() -> list[str]:
    async with _get_connection() as conn:
        rows = await conn.execute(
            "SELECT conname FROM pg_constraint WHERE contype = 'u' AND conname = ANY(%s)",
            (list(REQUIRED_CONSTRAINTS),),
        )
        present = {row[0] async for row in rows}
    return [name for name in REQUIRED_CONSTRAINTS if name not in present]


async def _ensure_schema() -> None:
    applied = await run_migrations()
    version = await get_current_version()
    if applied:
        logger.info("Applied %d migrations, schema now at version %d", applied, version)

    missing = await missing_constraints()
    if missing:
        raise RuntimeError(f"Schema version {version} lacks unique constraints: {', '.join(missing)}")
