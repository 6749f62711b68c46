import logging
import os

from flask import Flask, jsonify
from sqlalchemy import text

from ghbuys.config import Config, is_production, validate_config
from ghbuys.extensions import db, migrate, cors, login_manager
from ghbuys.errors import register_error_handlers
from ghbuys.auth import api_auth
from ghbuys.cli import register_cli
from ghbuys.segments.segment_payment_webhooks import webhooks_bp
from ghbuys.segments.segment_payments import payments_bp
from ghbuys.segments.segment_vendors import vendors_bp
from ghbuys.segments.segment_admin_vendors import admin_bp
from ghbuys.segments.segment_products import products_bp
from ghbuys.segments.segment_orders import orders_bp
from ghbuys.segments.segment_vendor_dashboard import vendor_bp

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL") or "INFO").upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app.logger.handlers.clear()
    app.logger.addHandler(handler)
    app.logger.setLevel(level)


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    env = str(app.config.get("ENV") or "dev").strip().lower()

    # Production safety checks
    if is_production(env):
        secret = (app.config.get("SECRET_KEY") or "").strip()
        if not secret or len(secret) < 16:
            raise RuntimeError("SECRET_KEY must be set and at least 16 chars in production")
        has_db_url = (
            (os.getenv("DATABASE_URL") or "").strip()
            or (os.getenv("SQLALCHEMY_DATABASE_URI") or "").strip()
            or (config_overrides or {}).get("SQLALCHEMY_DATABASE_URI")
        )
        if not has_db_url:
            raise RuntimeError("DATABASE_URL (or SQLALCHEMY_DATABASE_URI) must be set in production")

    _configure_logging(app)
    for problem in validate_config(app.config):
        app.logger.warning("Config: %s", problem)

    # Ensure instance dir exists for SQLite paths
    os.makedirs(app.config["INSTANCE_DIR"], exist_ok=True)

    # CORS configuration
    cors_origins = (app.config.get("CORS_ORIGINS") or "").strip()
    origins = [o.strip() for o in cors_origins.split(",") if o.strip()]
    if not origins and not is_production(env):
        origins = ["*"]
    cors.init_app(app, resources={r"/api/*": {"origins": origins}})

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=os.path.join(app.config["BACKEND_DIR"], "migrations"))
    login_manager.init_app(app)

    register_error_handlers(app)

    app.register_blueprint(api_auth)
    app.register_blueprint(webhooks_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(vendors_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(vendor_bp)

    register_cli(app)

    # Outside production the schema comes straight from the models; production uses migrations
    if not is_production(env):
        with app.app_context():
            db.create_all()

    @app.get("/api/health")
    def health():
        db_state = "ok"
        try:
            db.session.execute(text("SELECT 1"))
        except Exception:
            app.logger.exception("Health check database query failed")
            db_state = "fail"
        return jsonify({
            "ok": True,
            "service": "ghbuys-backend",
            "env": env,
            "db": db_state,
        })

    @app.errorhandler(404)
    def _not_found(_err):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def _method_not_allowed(_err):
        return jsonify({"error": "Method not allowed"}), 405

    return app
