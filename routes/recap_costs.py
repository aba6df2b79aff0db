from __future__ import annotations

from typing import Any, Dict, List

from flask import Blueprint, jsonify, request

from errors import ValidationError
from services.gated_store import GatedStore
from services.period_dates import month_range_utc, month_start_utc
from services.records import json_body, json_docs, safe_float, serialize_doc, serialize_many

recap_costs_bp = Blueprint("recap_costs", __name__)

AMOUNT_FIELDS = ("rpKhl", "rpPremi", "rpBorongan")


def _normalize_cost(doc: Dict[str, Any]) -> Dict[str, Any]:
    # Costs are kept per month: the date is stored as the 1st of its month.
    if doc.get("date") is not None:
        doc["date"] = month_start_utc(doc["date"])
    return doc


costs = GatedStore(
    "operational_costs",
    date_field="date",
    entity="COST",
    required=("date", "category", "jenisPekerjaan"),
    number_fields=("hk", "hasilKerja", "output") + AMOUNT_FIELDS,
    normalize=_normalize_cost,
    indexes=[[("date", 1), ("category", 1)]],
)

COST_DEFAULTS = {
    "aktivitas": "",
    "satuan": "",
    "hk": 0,
    "hasilKerja": 0,
    "output": 0,
    "satuanOutput": "",
    "rpKhl": 0,
    "rpPremi": 0,
    "rpBorongan": 0,
}


def _month_query():
    month = request.args.get("month")
    year = request.args.get("year")
    if not month or not year:
        raise ValidationError("Month and Year are required")
    rng = month_range_utc(year, month)
    if rng is None:
        raise ValidationError("Invalid month or year")
    return {"date": {"$gte": rng[0], "$lte": rng[1]}}


def summarize_costs(docs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Totals per category plus a grand total."""
    by_cat: Dict[str, Dict[str, float]] = {}
    for d in docs:
        cat = (d.get("category") or "").strip() or "Uncategorized"
        row = by_cat.setdefault(cat, {"hk": 0.0, **{f: 0.0 for f in AMOUNT_FIELDS}, "total": 0.0, "count": 0})
        row["hk"] += safe_float(d.get("hk"))
        amount = 0.0
        for f in AMOUNT_FIELDS:
            v = safe_float(d.get(f))
            row[f] += v
            amount += v
        row["total"] += amount
        row["count"] += 1

    categories = [{"category": k, **v} for k, v in sorted(by_cat.items())]
    return {
        "categories": categories,
        "grand_total": sum(c["total"] for c in categories),
        "total_hk": sum(c["hk"] for c in categories),
    }


@recap_costs_bp.get("/recap-costs")
def list_costs():
    docs = costs.find(_month_query(), sort=[("category", 1), ("date", 1)])
    return jsonify(serialize_many(docs))


@recap_costs_bp.get("/recap-costs/summary")
def costs_summary():
    docs = costs.find(_month_query())
    return jsonify(summarize_costs(docs))


@recap_costs_bp.get("/recap-costs/<cost_id>")
def get_cost(cost_id):
    return jsonify(serialize_doc(costs.get(cost_id)))


@recap_costs_bp.post("/recap-costs")
def create_cost():
    body = json_body()
    created = costs.create(json_docs(), defaults=COST_DEFAULTS)
    out = serialize_many(created)
    return jsonify(out if isinstance(body, list) else out[0]), 201


@recap_costs_bp.put("/recap-costs/<cost_id>")
def update_cost(cost_id):
    body = json_body()
    if not isinstance(body, dict):
        raise ValidationError("Body must be an object")
    return jsonify(serialize_doc(costs.update(cost_id, body)))


@recap_costs_bp.delete("/recap-costs/<cost_id>")
def delete_cost(cost_id):
    costs.delete(cost_id)
    return jsonify({"ok": True})
