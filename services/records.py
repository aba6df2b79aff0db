from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from flask import request

from errors import ValidationError
from services.period_dates import end_of_day, is_date_only, parse_date, to_iso


def safe_object_id(raw: Any) -> Optional[ObjectId]:
    try:
        return ObjectId(raw)
    except Exception:
        return None


def require_object_id(raw: Any) -> ObjectId:
    oid = safe_object_id(raw)
    if oid is None:
        raise ValidationError("Invalid id")
    return oid


def safe_float(v: Any, default: float = 0.0) -> float:
    try:
        if v is None or v == "":
            return default
        return float(v)
    except (TypeError, ValueError):
        return default


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Make a Mongo document JSON-friendly (ObjectId -> str, datetime -> ISO)."""
    if doc is None:
        return None
    out: Dict[str, Any] = {}
    for k, v in doc.items():
        if isinstance(v, ObjectId):
            out[k] = str(v)
        elif isinstance(v, datetime):
            out[k] = to_iso(v)
        elif isinstance(v, dict):
            out[k] = serialize_doc(v)
        elif isinstance(v, list):
            out[k] = [serialize_doc(x) if isinstance(x, dict) else (str(x) if isinstance(x, ObjectId) else to_iso(x)) for x in v]
        else:
            out[k] = v
    return out


def serialize_many(docs: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_doc(d) for d in docs]


def json_body() -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("JSON body is required")
    return data


def json_docs() -> List[Dict[str, Any]]:
    """Body as a list of objects; a single object becomes a one-element list."""
    data = json_body()
    docs = data if isinstance(data, list) else [data]
    if not docs or not all(isinstance(d, dict) for d in docs):
        raise ValidationError("Body must be an object or a non-empty list of objects")
    return docs


def require_fields(doc: Dict[str, Any], fields: Iterable[str]) -> None:
    missing = [f for f in fields if doc.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def coerce_dates(doc: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    for f in fields:
        if f in doc and doc[f] not in (None, ""):
            dt = parse_date(doc[f])
            if dt is None:
                raise ValidationError(f"Invalid date for {f}")
            doc[f] = dt
    return doc


def coerce_numbers(doc: Dict[str, Any], fields: Iterable[str], minimum: Optional[float] = None) -> Dict[str, Any]:
    for f in fields:
        if f not in doc or doc[f] in (None, ""):
            continue
        try:
            val = float(doc[f])
        except (TypeError, ValueError):
            raise ValidationError(f"{f} must be a number")
        if not math.isfinite(val):
            raise ValidationError(f"{f} must be a finite number")
        if minimum is not None and val < minimum:
            raise ValidationError(f"{f} must be >= {minimum:g}")
        doc[f] = val
    return doc


def to_division_id(v: Any) -> Any:
    try:
        return int(v)
    except (TypeError, ValueError):
        return v


def division_query(v: Any) -> Any:
    """Division ids were stored both as numbers and strings."""
    try:
        return {"$in": [int(v), str(v)]}
    except (TypeError, ValueError):
        return v


def strip_immutable(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k not in ("_id", "createdAt", "updatedAt")}


def stamp_created(doc: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.utcnow()
    doc["createdAt"] = now
    doc["updatedAt"] = now
    return doc


def date_range_filter(args, field: str = "date") -> Dict[str, Any]:
    """?date= exact day, or ?startDate=&endDate= inclusive range."""
    q: Dict[str, Any] = {}
    day = parse_date(args.get("date"))
    start = parse_date(args.get("startDate"))
    end = parse_date(args.get("endDate"))
    if end is not None and is_date_only(args.get("endDate")):
        end = end_of_day(end)
    if day is not None:
        q[field] = day
    if start is not None or end is not None:
        rng: Dict[str, Any] = {}
        if start is not None:
            rng["$gte"] = start
        if end is not None:
            rng["$lte"] = end
        q[field] = rng
    return q
