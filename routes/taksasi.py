from __future__ import annotations

from typing import Any, Dict, List

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

taksasi_bp = Blueprint("taksasi", __name__)


def _normalize_taksasi(doc: Dict[str, Any]) -> Dict[str, Any]:
    if "division_id" in doc:
        doc["division_id"] = to_division_id(doc["division_id"])
    return doc


estimates = GatedStore(
    "taksasi",
    date_field="date",
    entity="TAKSASI",
    required=("date", "estateId", "division_id", "block_no", "weightKg"),
    non_negative=("weightKg",),
    normalize=_normalize_taksasi,
    indexes=[[("date", 1), ("estateId", 1), ("division_id", 1), ("block_no", 1)]],
)


def per_block_totals(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Estimated kg per (estate, division, block), heaviest first."""
    totals: Dict[tuple, float] = {}
    for d in docs:
        key = (d.get("estateId"), d.get("division_id"), d.get("block_no"))
        totals[key] = totals.get(key, 0.0) + safe_float(d.get("weightKg"))
    rows = [
        {"estateId": e, "division_id": div, "block_no": b, "weightKg": kg}
        for (e, div, b), kg in totals.items()
    ]
    rows.sort(key=lambda r: r["weightKg"], reverse=True)
    return rows


def _taksasi_filter(args) -> Dict[str, Any]:
    q = date_range_filter(args, "date")
    if args.get("estateId"):
        q["estateId"] = args["estateId"]
    if args.get("division_id"):
        q["division_id"] = division_query(args["division_id"])
    return q


@taksasi_bp.get("/taksasi")
def list_taksasi():
    return jsonify(serialize_many(estimates.find(_taksasi_filter(request.args))))


@taksasi_bp.get("/taksasi/per-block")
def taksasi_per_block():
    return jsonify(per_block_totals(estimates.find(_taksasi_filter(request.args))))


@taksasi_bp.get("/taksasi/<taksasi_id>")
def get_taksasi(taksasi_id):
    return jsonify(serialize_doc(estimates.get(taksasi_id)))


@taksasi_bp.post("/taksasi")
def create_taksasi():
    body = json_body()
    created = estimates.create(json_docs())
    out = serialize_many(created)
    return jsonify(out if isinstance(body, list) else out[0]), 201


@taksasi_bp.put("/taksasi/<taksasi_id>")
def update_taksasi(taksasi_id):
    body = json_body()
    if not isinstance(body, dict):
        raise ValidationError("Body must be an object")
    return jsonify(serialize_doc(estimates.update(taksasi_id, body)))


@taksasi_bp.delete("/taksasi/<taksasi_id>")
def delete_taksasi(taksasi_id):
    estimates.delete(taksasi_id)
    return jsonify({"ok": True})
