from __future__ import annotations

from datetime import datetime

from flask import Blueprint, jsonify, request

from errors import ValidationError
from login import get_current_identity
from services.activity_audit import log_activity
from services.closing_registry import (
    close_month,
    create_closing_period,
    is_date_closed,
    list_closed_months,
    list_closing_periods,
    reopen_period,
)
from services.period_dates import app_year_month, parse_date
from services.records import serialize_doc, serialize_many

closing_bp = Blueprint("closing", __name__)


def _closer():
    ident = get_current_identity()
    if not ident.get("is_authenticated"):
        return None
    return {"user_id": ident.get("user_id"), "name": ident.get("name")}


# ---------- Closing periods (Tutup Buku) ----------

@closing_bp.get("/closing-periods")
def closing_periods():
    return jsonify(serialize_many(list_closing_periods()))


@closing_bp.post("/closing-periods")
def create_period():
    data = request.get_json(silent=True) or {}
    created = create_closing_period(
        data.get("startDate"),
        data.get("endDate"),
        month=data.get("month"),
        year=data.get("year"),
        notes=data.get("notes"),
        closed_by=_closer(),
    )
    log_activity("CREATE_CLOSING_PERIOD", {
        "id": str(created["_id"]),
        "month": created["month"],
        "year": created["year"],
    })
    return jsonify(serialize_doc(created)), 201


@closing_bp.delete("/closing-periods/<period_id>")
def delete_period(period_id):
    removed = reopen_period(period_id)
    log_activity("DELETE_CLOSING_PERIOD", {
        "id": period_id,
        "month": removed.get("month"),
        "year": removed.get("year"),
    })
    return jsonify({"ok": True})


@closing_bp.get("/closing-periods/check")
def check_date():
    raw = request.args.get("date")
    if parse_date(raw) is None:
        raise ValidationError("date query parameter is required (YYYY-MM-DD)")
    return jsonify({"date": raw, "closed": is_date_closed(raw)})


# ---------- Closed months ----------

@closing_bp.get("/closed-months")
def closed_months():
    return jsonify(list_closed_months())


@closing_bp.post("/close-month")
def close_month_route():
    data = request.get_json(silent=True) or {}
    year, month = data.get("year"), data.get("month")
    if not year or not month:
        year, month = app_year_month(datetime.utcnow())
    created = close_month(year, month, closed_by=_closer(), notes=data.get("notes"))
    log_activity("CLOSE_MONTH", {"month": created["month"], "year": created["year"]})
    return jsonify({"success": True, "period": serialize_doc(created)}), 201
