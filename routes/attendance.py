from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from errors import ValidationError
from services.gated_store import GatedStore
from services.records import (
    date_range_filter,
    json_body,
    json_docs,
    serialize_doc,
    serialize_many,
    to_division_id,
)

attendance_bp = Blueprint("attendance", __name__)

ATTENDANCE_STATUSES = ("present", "absent", "leave")


def _normalize_attendance(doc: Dict[str, Any]) -> Dict[str, Any]:
    status = doc.get("status")
    if status is not None and status not in ATTENDANCE_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(ATTENDANCE_STATUSES)}")
    if "division_id" in doc:
        doc["division_id"] = to_division_id(doc["division_id"])
    return doc


attendance = GatedStore(
    "attendance",
    date_field="date",
    entity="ATTENDANCE",
    required=("date", "employeeId", "status"),
    number_fields=("hk",),
    non_negative=("hk",),
    normalize=_normalize_attendance,
    indexes=[([("date", 1), ("employeeId", 1)], {"unique": True})],
    duplicate_message="Attendance already recorded for this employee and date",
)


@attendance_bp.get("/attendance")
def list_attendance():
    q = date_range_filter(request.args, "date")
    if request.args.get("employeeId"):
        q["employeeId"] = request.args["employeeId"]
    return jsonify(serialize_many(attendance.find(q)))


@attendance_bp.get("/attendance/<attendance_id>")
def get_attendance(attendance_id):
    return jsonify(serialize_doc(attendance.get(attendance_id)))


@attendance_bp.post("/attendance")
def create_attendance():
    body = json_body()
    created = attendance.create(json_docs(), defaults={"hk": 1})
    out = serialize_many(created)
    return jsonify(out if isinstance(body, list) else out[0]), 201


@attendance_bp.put("/attendance/<attendance_id>")
def update_attendance(attendance_id):
    body = json_body()
    if not isinstance(body, dict):
        raise ValidationError("Body must be an object")
    return jsonify(serialize_doc(attendance.update(attendance_id, body)))


@attendance_bp.delete("/attendance/<attendance_id>")
def delete_attendance(attendance_id):
    attendance.delete(attendance_id)
    return jsonify({"ok": True})
