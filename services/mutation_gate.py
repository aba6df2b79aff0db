"""
Guard between an incoming write and a record store.

Every create / update / delete on a dated record asks the closing registry
first. The registry is queried per call (no cached state), so a period closed
by another process is seen by the very next write.

The check and the following write are not atomic: a period closed between
the two lets that one write through.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

from pymongo.collection import Collection

from errors import NotFound, PeriodClosed
from services.closing_registry import is_date_closed
from services.period_dates import local_day_label, parse_date
from services.records import require_object_id

logger = logging.getLogger(__name__)


def ensure_date_open(value: Any) -> None:
    """Raise PeriodClosed if `value` falls inside an active closing period."""
    if parse_date(value) is None:
        return
    if is_date_closed(value):
        day = local_day_label(value)
        logger.warning("Blocked mutation dated %s: period closed", day)
        raise PeriodClosed(day)


def ensure_payload_open(docs: Iterable[Dict[str, Any]], date_field: str) -> None:
    """Check every document of a (bulk) create, not only the first one."""
    checked = set()
    for doc in docs:
        dt = parse_date(doc.get(date_field))
        if dt is None or dt in checked:
            continue
        checked.add(dt)
        ensure_date_open(dt)


def load_for_mutation(col: Collection, record_id: Any, date_field: str) -> Dict[str, Any]:
    """
    Fetch the stored record and gate on its stored date (404 if missing).
    """
    oid = require_object_id(record_id)
    existing = col.find_one({"_id": oid})
    if not existing:
        raise NotFound()
    ensure_date_open(existing.get(date_field))
    return existing


def ensure_move_open(existing: Dict[str, Any], changes: Dict[str, Any], date_field: str) -> None:
    """An update that changes the date must not land in a closed period either."""
    if date_field in changes and changes[date_field] != existing.get(date_field):
        ensure_date_open(changes[date_field])
