import os
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from sqlalchemy import text

from models import db
from seed import initialize_database
from catalog_core.errors import install_json_error_handlers
from catalog_core.api import api_bp
from catalog_core.metrics import metrics_bp
from catalog_core.db_config import is_postgres_url, parse_database_url

# Load .env next to app.py when present
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))

CORS_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_HEADERS = "Content-Type"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"true", "1", "yes"}


def _database_uri(app: Flask) -> str:
    database_url = (os.getenv("DATABASE_URL") or "").strip()
    if database_url:
        if is_postgres_url(database_url):
            cfg = parse_database_url(database_url)
            app.logger.info("Using DATABASE_URL -> %s", cfg.describe())
            return cfg.to_url().render_as_string(hide_password=False)
        app.logger.info("Using connection string as-is (not postgresql:// format)")
        return database_url

    instance_db = Path(app.instance_path) / "moviecatalog.db"
    instance_db.parent.mkdir(parents=True, exist_ok=True)
    app.logger.info("DB file -> %s", instance_db.resolve())
    return f"sqlite:///{instance_db}"


def create_app(test_config=None):
    app = Flask(__name__)
    app.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    # Load env config
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["SEED_ON_STARTUP"] = _env_flag("SEED_ON_STARTUP", True)
    app.config["CORS_ORIGINS"] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()
    ]
    if test_config:
        app.config.update(test_config)

    # Database configuration; overrides win over the environment
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        app.config["SQLALCHEMY_DATABASE_URI"] = _database_uri(app)

    # Installing JSON error handlers & SQLAlchemy
    install_json_error_handlers(app)
    db.init_app(app)

    # Schema + sample data; a broken database must not keep the app from starting
    with app.app_context():
        try:
            initialize_database(app.logger, seed=app.config["SEED_ON_STARTUP"])
        except Exception:
            db.session.rollback()
            app.logger.exception("Database initialization skipped due to error")

    @app.after_request
    def _cors(response):
        origin = request.headers.get("Origin")
        allowed = app.config["CORS_ORIGINS"]
        if origin and ("*" in allowed or origin in allowed):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Methods"] = CORS_METHODS
            response.headers["Access-Control-Allow-Headers"] = CORS_HEADERS
            response.headers.add("Vary", "Origin")
        return response

    # HEALTH CHECK ENDPOINT
    @app.route("/health")
    def health():
        """
        Basic health endpoint for monitoring.
        Returns 200 if DB is reachable, 500 otherwise.
        """
        db_ok = True
        try:
            db.session.execute(text("SELECT 1"))
        except Exception as e:
            db.session.rollback()
            app.logger.error("Health check could not reach the database: %s", e)
            db_ok = False

        status_code = 200 if db_ok else 500

        return jsonify({"status": "ok" if db_ok else "error", "database": db_ok}), status_code

    # Register blueprints
    app.register_blueprint(api_bp)
    app.register_blueprint(metrics_bp)

    return app


# Development only
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("PORT", 8000))
    create_app().run(host="0.0.0.0", port=port, debug=True)
