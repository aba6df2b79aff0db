from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from errors import ValidationError
from services.gated_store import GatedStore
from services.records import (
    date_range_filter,
    division_query,
    json_body,
    json_docs,
    safe_float,
    serialize_doc,
    serialize_many,
    to_division_id,
)

panen_bp = Blueprint("panen", __name__)


def _normalize_panen(doc: Dict[str, Any]) -> Dict[str, Any]:
    if "division_id" in doc:
        doc["division_id"] = to_division_id(doc["division_id"])
    # Wage total follows its parts unless the client sent one
    if "totalUpah" not in doc and "upahBasis" in doc and "premi" in doc:
        doc["totalUpah"] = safe_float(doc.get("upahBasis")) + safe_float(doc.get("premi"))
    return doc


harvests = GatedStore(
    "panen",
    date_field="date_panen",
    entity="PANEN",
    required=("date_panen", "estateId", "division_id", "block_no", "weightKg"),
    number_fields=("janjangTBS", "janjangKosong", "upahBasis", "premi", "totalUpah"),
    non_negative=("weightKg",),
    normalize=_normalize_panen,
    indexes=[[("date_panen", 1), ("estateId", 1), ("division_id", 1), ("block_no", 1)]],
)

PANEN_DEFAULTS = {"janjangTBS": 0, "janjangKosong": 0, "upahBasis": 0, "premi": 0}


def harvest_filter(args) -> Dict[str, Any]:
    q = date_range_filter(args, "date_panen")
    if args.get("date_panen"):
        q.update(date_range_filter({"date": args.get("date_panen")}, "date_panen"))
    if args.get("estateId"):
        q["estateId"] = args["estateId"]
    if args.get("division_id"):
        q["division_id"] = division_query(args["division_id"])
    if args.get("block_no"):
        q["block_no"] = args["block_no"]
    return q


@panen_bp.get("/panen")
def list_panen():
    return jsonify(serialize_many(harvests.find(harvest_filter(request.args))))


@panen_bp.get("/panen/<panen_id>")
def get_panen(panen_id):
    return jsonify(serialize_doc(harvests.get(panen_id)))


@panen_bp.post("/panen")
def create_panen():
    body = json_body()
    created = harvests.create(json_docs(), defaults=PANEN_DEFAULTS)
    out = serialize_many(created)
    return jsonify(out if isinstance(body, list) else out[0]), 201


@panen_bp.put("/panen/<panen_id>")
def update_panen(panen_id):
    body = json_body()
    if not isinstance(body, dict):
        raise ValidationError("Body must be an object")
    return jsonify(serialize_doc(harvests.update(panen_id, body)))


@panen_bp.delete("/panen/<panen_id>")
def delete_panen(panen_id):
    harvests.delete(panen_id)
    return jsonify({"ok": True})
