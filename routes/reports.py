from __future__ import annotations

from flask import Blueprint, jsonify, request

from errors import ValidationError
from services.gated_store import GatedStore
from services.records import (
    date_range_filter,
    json_body,
    json_docs,
    serialize_doc,
    serialize_many,
)

reports_bp = Blueprint("reports", __name__)

REPORT_STATUSES = ("pending", "approved", "rejected")


def _check_status(doc):
    status = doc.get("status")
    if status is not None and status not in REPORT_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(REPORT_STATUSES)}")
    return doc


reports = GatedStore(
    "reports",
    date_field="date",
    entity="REPORT",
    required=("employeeName", "date", "division", "jobType", "hk"),
    number_fields=("hk",),
    non_negative=("hk",),
    normalize=_check_status,
    indexes=[[("date", -1)], [("status", 1), ("date", -1)]],
)


@reports_bp.get("/reports")
def list_reports():
    q = date_range_filter(request.args, "date")
    for key in ("division", "status", "employeeId", "jobType"):
        val = request.args.get(key)
        if val:
            q[key] = val
    return jsonify(serialize_many(reports.find(q, limit=500)))


@reports_bp.get("/reports/<report_id>")
def get_report(report_id):
    return jsonify(serialize_doc(reports.get(report_id)))


@reports_bp.post("/reports")
def create_report():
    body = json_body()
    created = reports.create(json_docs(), defaults={"status": "pending"})
    out = serialize_many(created)
    return jsonify(out if isinstance(body, list) else out[0]), 201


@reports_bp.put("/reports/<report_id>")
def update_report(report_id):
    body = json_body()
    if not isinstance(body, dict):
        raise ValidationError("Body must be an object")
    return jsonify(serialize_doc(reports.update(report_id, body)))


@reports_bp.post("/reports/<report_id>/approve")
def approve_report(report_id):
    updated = reports.update(
        report_id,
        {"status": "approved", "rejectedReason": None},
        action="APPROVE_REPORT",
    )
    return jsonify(serialize_doc(updated))


@reports_bp.post("/reports/<report_id>/reject")
def reject_report(report_id):
    data = request.get_json(silent=True) or {}
    reason = (data.get("reason") or "").strip() or None
    updated = reports.update(
        report_id,
        {"status": "rejected", "rejectedReason": reason},
        action="REJECT_REPORT",
    )
    return jsonify(serialize_doc(updated))


@reports_bp.delete("/reports/<report_id>")
def delete_report(report_id):
    reports.delete(report_id)
    return jsonify({"ok": True})
