from __future__ import annotations

from flask import Blueprint, jsonify, request

from db import db, employees_collection, ping
from services.activity_audit import list_activity_logs
from services.period_dates import today_utc_range
from services.records import serialize_many

dashboard_bp = Blueprint("dashboard", __name__)

reports_col = db["reports"]
panen_col = db["panen"]


@dashboard_bp.get("/health")
def health():
    return jsonify({"ok": True, "service": "sawitrack", "db": ping()})


@dashboard_bp.get("/activity-logs")
def activity_logs():
    docs = list_activity_logs(request.args.get("limit", 50), action=request.args.get("action"))
    return jsonify(serialize_many(docs))


@dashboard_bp.get("/stats")
def stats():
    start, end = today_utc_range()
    today = {"$gte": start, "$lte": end}

    panen_today = list(panen_col.aggregate([
        {"$match": {"date_panen": today}},
        {"$group": {"_id": None, "kg": {"$sum": "$weightKg"}, "count": {"$sum": 1}}},
    ]))
    panen_row = panen_today[0] if panen_today else {}

    return jsonify({
        "totalEmployees": employees_collection.count_documents({"status": "active"}),
        "todayReports": reports_col.count_documents({"date": today}),
        "pendingCount": reports_col.count_documents({"status": "pending"}),
        "panenToday": int(panen_row.get("count", 0)),
        "panenTodayKg": float(panen_row.get("kg", 0) or 0),
    })
