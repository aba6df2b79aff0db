from flask import Flask
from flask_cors import CORS
from flask_login import LoginManager
from datetime import timedelta
import logging

from config_constants import API_BASE_PATH, CORS_ORIGIN, LOG_LEVEL, SECRET_KEY
from errors import register_error_handlers
from user_model import get_user_by_id

# ---------------- Blueprints ----------------
from login import login_bp, bcrypt
from routes.closing import closing_bp
from routes.dashboard import dashboard_bp
from routes.reports import reports_bp
from routes.recap_costs import recap_costs_bp
from routes.panen import panen_bp
from routes.angkut import angkut_bp
from routes.taksasi import taksasi_bp
from routes.attendance import attendance_bp

from services.activity_audit import ensure_activity_log_indexes
from services.closing_registry import ensure_closing_indexes
from services.gated_store import ensure_store_indexes

logger = logging.getLogger(__name__)


def create_app(config=None):
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = SECRET_KEY
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=7)
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["REMEMBER_COOKIE_DURATION"] = timedelta(days=7)
    app.config["REMEMBER_COOKIE_HTTPONLY"] = True
    app.config["REMEMBER_COOKIE_SAMESITE"] = "Lax"
    is_prod = app.config.get("ENV") == "production"
    app.config["SESSION_COOKIE_SECURE"] = is_prod
    app.config["REMEMBER_COOKIE_SECURE"] = is_prod
    if config:
        app.config.update(config)

    # ---------------- Auth ----------------
    login_manager = LoginManager()
    login_manager.init_app(app)
    bcrypt.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return get_user_by_id(user_id)

    # Frontend lives on another origin and sends cookies
    CORS(
        app,
        resources={rf"{API_BASE_PATH}/*": {"origins": CORS_ORIGIN}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    # ---------------- Blueprints Registration ----------------
    app.register_blueprint(login_bp, url_prefix=f"{API_BASE_PATH}/auth")
    app.register_blueprint(dashboard_bp, url_prefix=API_BASE_PATH)
    app.register_blueprint(closing_bp, url_prefix=API_BASE_PATH)
    app.register_blueprint(reports_bp, url_prefix=API_BASE_PATH)
    app.register_blueprint(recap_costs_bp, url_prefix=API_BASE_PATH)
    app.register_blueprint(panen_bp, url_prefix=API_BASE_PATH)
    app.register_blueprint(angkut_bp, url_prefix=API_BASE_PATH)
    app.register_blueprint(taksasi_bp, url_prefix=API_BASE_PATH)
    app.register_blueprint(attendance_bp, url_prefix=API_BASE_PATH)

    register_error_handlers(app)

    ensure_activity_log_indexes()
    ensure_closing_indexes()
    ensure_store_indexes()

    logger.info("SawiTrack API mounted at %s", API_BASE_PATH)
    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
