from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from db import db
from errors import NotFound, ValidationError
from services.period_dates import (
    app_year_month,
    end_of_day,
    is_date_only,
    month_range_utc,
    parse_date,
)

logger = logging.getLogger(__name__)

closing_periods_col = db["closing_periods"]
closing_months_col = db["closing_months"]

STATUS_ACTIVE = "active"


def ensure_closing_indexes() -> None:
    try:
        closing_periods_col.create_index([("startDate", 1), ("endDate", 1)])
        closing_periods_col.create_index([("status", 1)])
        closing_months_col.create_index([("year", 1), ("month", 1)], unique=True)
    except Exception:
        logger.warning("Could not create closing indexes", exc_info=True)


def _int_or_none(v: Any) -> Optional[int]:
    try:
        if v is None or v == "":
            return None
        return int(v)
    except (TypeError, ValueError):
        return None


def create_closing_period(
    start_date: Any,
    end_date: Any,
    month: Any = None,
    year: Any = None,
    notes: Optional[str] = None,
    closed_by: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Store a new active closing period.

    Duplicate active periods for the same (month, year) are accepted; only the
    close-month shortcut is guarded by the unique ClosingMonth marker.
    """
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None:
        raise ValidationError("startDate and endDate are required (YYYY-MM-DD)")
    if is_date_only(end_date):
        end = end_of_day(end)
    if start > end:
        raise ValidationError("startDate must not be after endDate")

    m = _int_or_none(month)
    y = _int_or_none(year)
    if m is None or y is None:
        # Same derivation the period backfill uses: month/year of startDate
        derived = app_year_month(start)
        if m is None:
            m = derived[1]
        if y is None:
            y = derived[0]
    if not 1 <= m <= 12:
        raise ValidationError("month must be between 1 and 12")

    closed_by = closed_by or {}
    doc = {
        "startDate": start,
        "endDate": end,
        "month": m,
        "year": y,
        "status": STATUS_ACTIVE,
        "closedBy": closed_by.get("user_id") or None,
        "closedByName": closed_by.get("name") or None,
        "closedAt": datetime.utcnow(),
        "notes": (notes or "").strip() or None,
    }
    res = closing_periods_col.insert_one(doc)
    doc["_id"] = res.inserted_id
    logger.info("Closed period %s..%s (%02d/%d)", start.isoformat(), end.isoformat(), m, y)
    return doc


def close_month(year: Any, month: Any, closed_by: Optional[Dict[str, Any]] = None,
                notes: Optional[str] = None) -> Dict[str, Any]:
    """Close a whole app-timezone calendar month."""
    rng = month_range_utc(year, month)
    if rng is None:
        raise ValidationError("Invalid month or year")
    y, m = int(year), int(month)

    try:
        closing_months_col.insert_one({"year": y, "month": m, "closedAt": datetime.utcnow()})
    except DuplicateKeyError:
        raise ValidationError(f"Bulan {m}/{y} sudah ditutup.")

    start, end = rng
    return create_closing_period(start, end, month=m, year=y, notes=notes, closed_by=closed_by)


def list_closing_periods() -> List[Dict[str, Any]]:
    return list(closing_periods_col.find({}).sort("startDate", -1))


def list_closed_months() -> List[Dict[str, int]]:
    seen = set()
    out: List[Dict[str, int]] = []
    for p in closing_periods_col.find({"status": STATUS_ACTIVE}, {"year": 1, "month": 1, "startDate": 1}):
        y, m = p.get("year"), p.get("month")
        if y is None or m is None:
            ym = app_year_month(p.get("startDate"))
            if ym is None:
                continue
            y, m = ym
        key = (int(y), int(m))
        if key in seen:
            continue
        seen.add(key)
        out.append({"year": key[0], "month": key[1]})
    out.sort(key=lambda r: (r["year"], r["month"]), reverse=True)
    return out


def reopen_period(period_id: str) -> Dict[str, Any]:
    """Hard-delete a closing period. The activity log is the only trace left."""
    try:
        oid = ObjectId(period_id)
    except Exception:
        raise ValidationError("Invalid closing period id")

    doc = closing_periods_col.find_one_and_delete({"_id": oid})
    if not doc:
        raise NotFound("Closing period not found")

    y, m = doc.get("year"), doc.get("month")
    if y is not None and m is not None:
        # keep the marker while a duplicate period still closes the month
        if not closing_periods_col.find_one({"year": y, "month": m, "status": STATUS_ACTIVE}):
            closing_months_col.delete_one({"year": y, "month": m})
    logger.info("Reopened period %s (%s/%s)", period_id, doc.get("month"), doc.get("year"))
    return doc


def find_closing_period(value: Any) -> Optional[Dict[str, Any]]:
    d = parse_date(value)
    if d is None:
        return None
    return closing_periods_col.find_one({
        "status": STATUS_ACTIVE,
        "startDate": {"$lte": d},
        "endDate": {"$gte": d},
    })


def is_date_closed(value: Any) -> bool:
    """True if `value` lies inside [startDate, endDate] of any active period."""
    return find_closing_period(value) is not None
