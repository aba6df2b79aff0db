from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from pymongo import ReturnDocument
from pymongo.errors import BulkWriteError, DuplicateKeyError

from db import db
from errors import NotFound, ValidationError
from services.activity_audit import log_activity
from services.mutation_gate import (
    ensure_move_open,
    ensure_payload_open,
    load_for_mutation,
)
from services.records import (
    coerce_dates,
    coerce_numbers,
    require_fields,
    require_object_id,
    stamp_created,
    strip_immutable,
)

logger = logging.getLogger(__name__)

Normalizer = Callable[[Dict[str, Any]], Dict[str, Any]]

STORES: List["GatedStore"] = []


class GatedStore:
    """
    CRUD over one dated collection with every write passed through the
    mutation gate and recorded in the activity log.
    """

    def __init__(
        self,
        collection: str,
        date_field: str,
        entity: str,
        required: Sequence[str] = (),
        date_fields: Sequence[str] = (),
        number_fields: Sequence[str] = (),
        non_negative: Sequence[str] = (),
        normalize: Optional[Normalizer] = None,
        indexes: Sequence[Any] = (),
        duplicate_message: str = "Duplicate record",
    ):
        self.col = db[collection]
        self.date_field = date_field
        self.entity = entity
        self.required = tuple(required)
        self.date_fields = tuple(date_fields) or (date_field,)
        self.number_fields = tuple(number_fields)
        self.non_negative = tuple(non_negative)
        self.normalize = normalize
        self.indexes = list(indexes)
        self.duplicate_message = duplicate_message
        STORES.append(self)

    def ensure_indexes(self) -> None:
        for entry in self.indexes:
            keys, opts = entry if isinstance(entry, tuple) else (entry, {})
            try:
                self.col.create_index(keys, **opts)
            except Exception:
                logger.warning("Could not create index %s on %s", keys, self.col.name, exc_info=True)

    # ---------- helpers ----------

    def _clean(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        doc = strip_immutable(doc)
        coerce_dates(doc, self.date_fields)
        coerce_numbers(doc, [f for f in self.number_fields if f not in self.non_negative])
        coerce_numbers(doc, self.non_negative, minimum=0)
        return doc

    def _normalize(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        return self.normalize(doc) if self.normalize else doc

    # ---------- reads ----------

    def find(self, query: Dict[str, Any], sort: Optional[List] = None, limit: int = 0) -> List[Dict[str, Any]]:
        cursor = self.col.find(query)
        cursor = cursor.sort(sort or [(self.date_field, -1)])
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def get(self, record_id: Any) -> Dict[str, Any]:
        doc = self.col.find_one({"_id": require_object_id(record_id)})
        if not doc:
            raise NotFound()
        return doc

    # ---------- writes ----------

    def create(self, docs: List[Dict[str, Any]], defaults: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        cleaned = []
        entered = []
        for raw in docs:
            require_fields(raw, self.required)
            doc = self._clean({**(defaults or {}), **raw})
            # gate on the date as entered, before normalize may rewrite it
            entered.append({self.date_field: doc.get(self.date_field)})
            cleaned.append(stamp_created(self._normalize(doc)))

        ensure_payload_open(entered, self.date_field)

        try:
            res = self.col.insert_many(cleaned)
        except (BulkWriteError, DuplicateKeyError):
            raise ValidationError(self.duplicate_message)
        for doc, oid in zip(cleaned, res.inserted_ids):
            doc["_id"] = oid
        log_activity(f"CREATE_{self.entity}", {"count": len(cleaned)})
        return cleaned

    def update(self, record_id: Any, changes: Dict[str, Any], action: Optional[str] = None) -> Dict[str, Any]:
        existing = load_for_mutation(self.col, record_id, self.date_field)
        changes = self._clean(changes)
        for f in self.required:
            if f in changes and changes[f] in (None, ""):
                raise ValidationError(f"{f} cannot be empty")
        moved = {self.date_field: changes[self.date_field]} if self.date_field in changes else {}
        changes = self._normalize(changes)
        ensure_move_open(existing, moved, self.date_field)

        changes["updatedAt"] = datetime.utcnow()
        try:
            updated = self.col.find_one_and_update(
                {"_id": existing["_id"]},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ValidationError(self.duplicate_message)
        if not updated:
            raise NotFound()
        log_activity(action or f"UPDATE_{self.entity}", {"id": str(existing["_id"])})
        return updated

    def delete(self, record_id: Any) -> None:
        existing = load_for_mutation(self.col, record_id, self.date_field)
        self.col.delete_one({"_id": existing["_id"]})
        log_activity(f"DELETE_{self.entity}", {"id": str(existing["_id"])})


def ensure_store_indexes() -> None:
    for store in STORES:
        store.ensure_indexes()
