"""Per-date availability statistics for the organizer dashboard."""

import logging
from typing import Any

from datevote import db
from datevote.events import require_event
from datevote.models.availability import SortOrder

logger = logging.getLogger(__name__)


def summarize_dates(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Group joined date/score rows into one entry per candidate date.

    Rows with no attendee (a date nobody scored) still yield an entry, with
    ``response_count`` 0 and ``average_score`` 0.0.
    """
    by_date: dict[int, dict[str, Any]] = {}
    for row in rows:
        entry = by_date.get(row["date_id"])
        if entry is None:
            entry = by_date[row["date_id"]] = {
                "id": row["date_id"],
                "date": row["date"],
                "suggested_by_organizer": row["suggested_by_organizer"],
                "responses": [],
            }
        if row["attendee_name"] is not None and row["score"] is not None:
            entry["responses"].append({"attendee_name": row["attendee_name"], "score": row["score"]})

    for entry in by_date.values():
        scores = [r["score"] for r in entry["responses"]]
        entry["response_count"] = len(scores)
        entry["average_score"] = sum(scores) / len(scores) if scores else 0.0
    return list(by_date.values())


def sort_dates(dates: list[dict[str, Any]], order: SortOrder = "date") -> list[dict[str, Any]]:
    if order == "score":
        return sorted(dates, key=lambda d: (-d["average_score"], -d["response_count"], d["date"], d["id"]))
    return sorted(dates, key=lambda d: (d["date"], d["id"]))


def summarize_event(dates: list[dict[str, Any]], total_responses: int) -> dict[str, Any]:
    scored = [d for d in dates if d["response_count"] > 0]
    best = min(scored, key=lambda d: (-d["average_score"], -d["response_count"], d["date"]), default=None)
    return {
        "total_dates": len(dates),
        "total_responses": total_responses,
        "max_responses": max((d["response_count"] for d in dates), default=0),
        "best_score": best["average_score"] if best else None,
        "best_date": best["date"] if best else None,
    }


async def get_event_availability(event_id: int, order: SortOrder = "date") -> dict[str, Any]:
    """Aggregate every candidate date of an event from one consistent snapshot.

    Raises:
        EventNotFoundError: no event has ``event_id``.
    """
    async with db.snapshot() as conn:
        event = await require_event(event_id, conn)
        rows = await db.fetch_availability_rows(event_id, conn)
        total_responses = await db.count_responses(event_id, conn)
    dates = sort_dates(summarize_dates(rows), order)
    logger.debug("Aggregated %d dates for event %s", len(dates), event_id)
    return {
        "event": event,
        "dates": dates,
        "summary": summarize_event(dates, total_responses),
    }
