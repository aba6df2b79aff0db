from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from errors import ValidationError
from routes.panen import harvest_filter
from services.gated_store import GatedStore
from services.records import (
    date_range_filter,
    json_body,
    json_docs,
    serialize_doc,
    serialize_many,
    to_division_id,
)

angkut_bp = Blueprint("angkut", __name__)


def _normalize_angkut(doc: Dict[str, Any]) -> Dict[str, Any]:
    if "division_id" in doc:
        doc["division_id"] = to_division_id(doc["division_id"])
    return doc


# Transport is booked against the harvest date it carries (date_panen).
transports = GatedStore(
    "angkut",
    date_field="date_panen",
    entity="ANGKUT",
    required=("date_panen", "date_angkut", "estateId", "division_id", "block_no", "weightKg"),
    date_fields=("date_panen", "date_angkut"),
    number_fields=("jumlah",),
    non_negative=("weightKg",),
    normalize=_normalize_angkut,
    indexes=[[("date_panen", 1), ("date_angkut", 1), ("estateId", 1), ("division_id", 1), ("block_no", 1)]],
)


@angkut_bp.get("/angkut")
def list_angkut():
    q = harvest_filter(request.args)
    if request.args.get("date_angkut"):
        q.update(date_range_filter({"date": request.args["date_angkut"]}, "date_angkut"))
    if request.args.get("no_spb"):
        q["no_spb"] = request.args["no_spb"]
    return jsonify(serialize_many(transports.find(q)))


@angkut_bp.get("/angkut/<angkut_id>")
def get_angkut(angkut_id):
    return jsonify(serialize_doc(transports.get(angkut_id)))


@angkut_bp.post("/angkut")
def create_angkut():
    body = json_body()
    created = transports.create(json_docs(), defaults={"jumlah": 0})
    out = serialize_many(created)
    return jsonify(out if isinstance(body, list) else out[0]), 201


@angkut_bp.put("/angkut/<angkut_id>")
def update_angkut(angkut_id):
    body = json_body()
    if not isinstance(body, dict):
        raise ValidationError("Body must be an object")
    return jsonify(serialize_doc(transports.update(angkut_id, body)))


@angkut_bp.delete("/angkut/<angkut_id>")
def delete_angkut(angkut_id):
    transports.delete(angkut_id)
    return jsonify({"ok": True})
