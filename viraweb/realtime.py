"""
Realtime change feed.

Services publish one event per row mutation on a Redis channel scoped by
table and tenant (`realtime:{table}:{user_id}`); connected clients keep
their lists in sync with `apply_change`. Publishing is fail-open: a Redis
outage never fails the write that triggered it, and after a failure
publishing pauses for RETRY_AFTER_SECONDS instead of reconnecting on every write.
"""

import json
import logging
from datetime import date, datetime, time
from decimal import Decimal
from time import monotonic
from typing import Any, Optional

from sqlalchemy import inspect

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
EVENT_TYPES = {INSERT, UPDATE, DELETE}

RETRY_AFTER_SECONDS = 30

# monotonic() deadline before which publishing is skipped
_unavailable_until = 0.0


def channel_name(table: str, user_id: int) -> str:
    return f"realtime:{table}:{user_id}"


def _json_default(value: Any):
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


def row_to_dict(row: Any) -> dict:
    """Column values of an ORM instance"""
    if isinstance(row, dict):
        return dict(row)
    mapper = inspect(row).mapper
    return {attr.key: getattr(row, attr.key) for attr in mapper.column_attrs}


def build_event(table: str, event_type: str, row: Any) -> dict:
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown change event type: {event_type}")
    record = row_to_dict(row)
    return {
        "table": table,
        "eventType": event_type,
        "id": record.get("id"),
        "new": record if event_type != DELETE else {},
        "old": {"id": record.get("id")} if event_type == DELETE else {},
        "commit_timestamp": datetime.utcnow().isoformat(),
    }


def publish_change(table: str, user_id: int, event_type: str, row: Any) -> Optional[dict]:
    """Publish a change event for a tenant; returns the event or None when Redis is unavailable"""
    global _unavailable_until

    event = build_event(table, event_type, row)
    if monotonic() < _unavailable_until:
        return None

    try:
        from .rate_limiter import get_redis_client

        client = get_redis_client()
        client.publish(channel_name(table, user_id), json.dumps(event, default=_json_default))
        logger.debug(f"📡 Published {event_type} on {table} for user {user_id}")
        return event
    except Exception as e:
        _unavailable_until = monotonic() + RETRY_AFTER_SECONDS
        logger.warning(
            f"⚠️ Realtime publish skipped for {table} ({event_type}): {e}; "
            f"pausing for {RETRY_AFTER_SECONDS}s"
        )
        return None


def apply_change(rows: list[dict], event: dict) -> list[dict]:
    """
    Reconcile a client-held list with one change event.

    Inserts append (or replace a row already present), updates replace by id
    (appending when the row is unknown), deletes drop the id. Events are
    applied in delivery order, so the last event for an id wins.
    """
    event_type = event.get("eventType")
    if event_type == DELETE:
        row_id = (event.get("old") or {}).get("id", event.get("id"))
        return [row for row in rows if row.get("id") != row_id]

    if event_type not in (INSERT, UPDATE):
        return list(rows)

    new_row = event.get("new") or {}
    row_id = new_row.get("id", event.get("id"))
    replaced = False
    result = []
    for row in rows:
        if row.get("id") == row_id:
            result.append(new_row)
            replaced = True
        else:
            result.append(row)
    if not replaced:
        result.append(new_row)
    return result
