"""Database access for datevote.

Repository functions are re-exported here so callers can write
``from datevote import db`` and ``await db.fetch_event_by_id(...)``.
"""

from datevote.db.core import (
    _get_connection,
    snapshot,
    transaction,
    close_pool,
    get_pool_stats,
    init_pool,
    ping,
)
from datevote.db.dates import (
    find_date_by_day,
    get_or_create_date,
    list_dates,
    list_dates_for_events,
)
from datevote.db.events import (
    fetch_event_by_id,
    fetch_event_by_token,
    fetch_events_by_organizer,
    insert_event,
)
from datevote.db.responses import (
    count_responses,
    fetch_availability_rows,
    insert_availability,
    insert_response,
)
from datevote.db.users import (
    fetch_user_by_email,
    fetch_user_by_google_id,
    insert_user,
    link_google_id,
)

__all__ = [
    "_get_connection",
    "close_pool",
    "count_responses",
    "fetch_availability_rows",
    "fetch_event_by_id",
    "fetch_event_by_token",
    "fetch_events_by_organizer",
    "fetch_user_by_email",
    "fetch_user_by_google_id",
    "find_date_by_day",
    "get_or_create_date",
    "get_pool_stats",
    "init_pool",
    "insert_availability",
    "insert_event",
    "insert_response",
    "insert_user",
    "link_google_id",
    "list_dates",
    "list_dates_for_events",
    "ping",
    "snapshot",
    "transaction",
]
