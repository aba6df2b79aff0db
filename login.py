from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from flask_bcrypt import Bcrypt
from flask_login import current_user, login_required, login_user, logout_user

from errors import ValidationError
from user_model import User, find_user_doc_by_email

login_bp = Blueprint("login", __name__, url_prefix="/auth")
bcrypt = Bcrypt()
logger = logging.getLogger(__name__)


def client_ip(req) -> str | None:
    xff = req.headers.get("X-Forwarded-For", "")
    return xff.split(",")[0].strip() or req.remote_addr


def get_current_identity() -> dict:
    if getattr(current_user, "is_authenticated", False):
        return {
            "is_authenticated": True,
            "user_id": str(getattr(current_user, "id", "") or ""),
            "name": getattr(current_user, "name", "") or getattr(current_user, "email", "") or "User",
            "role": (getattr(current_user, "role", "") or "").lower(),
        }
    return {"is_authenticated": False, "user_id": None, "name": None, "role": None}


@login_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not email or not password:
        raise ValidationError("Email and password are required")

    doc = find_user_doc_by_email(email)
    stored = (doc or {}).get("password")
    if not doc or not isinstance(stored, str) or not stored.startswith("$2"):
        return jsonify({"error": "Invalid credentials"}), 401
    if not bcrypt.check_password_hash(stored, password):
        return jsonify({"error": "Invalid credentials"}), 401

    user = User(doc)
    if not user.is_active:
        return jsonify({"error": "Account inactive"}), 403

    login_user(user, remember=True)
    logger.info("Login %s (%s) from %s", user.email, user.role, client_ip(request))

    from services.activity_audit import log_activity
    log_activity("LOGIN", {"email": user.email})
    return jsonify({"user": user.to_public()})


@login_bp.post("/logout")
@login_required
def logout():
    from services.activity_audit import log_activity
    log_activity("LOGOUT", {})
    logout_user()
    return jsonify({"ok": True})


@login_bp.get("/me")
@login_required
def me():
    return jsonify(current_user.to_public())
