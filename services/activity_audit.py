from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import has_request_context, request as flask_request

from config_constants import ACTIVITY_LOG_TTL_DAYS
from db import db
from login import client_ip, get_current_identity

logger = logging.getLogger(__name__)

activity_logs_col = db["activity_logs"]

MAX_LIST_LIMIT = 500


def ensure_activity_log_indexes() -> None:
    try:
        # Logs expire after ACTIVITY_LOG_TTL_DAYS (90 by default)
        activity_logs_col.create_index(
            [("timestamp", 1)],
            expireAfterSeconds=ACTIVITY_LOG_TTL_DAYS * 24 * 60 * 60,
        )
        activity_logs_col.create_index([("user_id", 1), ("timestamp", -1)])
        activity_logs_col.create_index([("action", 1), ("timestamp", -1)])
    except Exception:
        logger.warning("Could not create activity log indexes", exc_info=True)


def log_activity(
    action: str,
    details: Optional[Dict[str, Any]] = None,
    user: Optional[Dict[str, Any]] = None,
) -> Optional[str]:
    """
    Append an activity log entry. Fire-and-forget: a failed insert is logged
    and never reaches the caller, so the mutation it describes stands.
    """
    details = details or {}
    try:
        ident = user or get_current_identity()
        ip = client_ip(flask_request) if has_request_context() else None
        doc = {
            "user_id": ident.get("user_id"),
            "user_name": ident.get("name") or details.get("user_name") or "System/Unknown",
            "role": ident.get("role"),
            "action": action,
            "details": details,
            "ip_address": ip,
            "timestamp": datetime.utcnow(),
        }
        res = activity_logs_col.insert_one(doc)
        return str(res.inserted_id)
    except Exception:
        logger.exception("Activity log write failed for %s", action)
        return None


def list_activity_logs(limit: Any = 50, action: Optional[str] = None) -> List[Dict[str, Any]]:
    try:
        n = int(limit)
    except (TypeError, ValueError):
        n = 50
    n = max(1, min(n or 50, MAX_LIST_LIMIT))
    q: Dict[str, Any] = {}
    if action:
        q["action"] = action
    return list(activity_logs_col.find(q).sort("timestamp", -1).limit(n))
