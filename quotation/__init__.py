import os
from flask import Flask, request, jsonify

# Load .env only for local/dev. In prod, env vars come from the platform.
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    load_dotenv(".env", override=True)


from .config import get_config
from .extensions import db, migrate, csrf
from .security import init_security
from .observability import init_logging, init_sentry
from .services.errors import NotFoundError, ServiceError, SpreadsheetError, StoreError, ValidationError

def create_app(config_overrides=None):
    app = Flask(__name__, template_folder="templates", instance_relative_config=True)

    # Config: clean, explicit, class-based
    app.config.from_object(get_config())
    if config_overrides:
        app.config.update(config_overrides)

    # sqlite default lives in the instance folder
    os.makedirs(app.instance_path, exist_ok=True)

    # --- Required env validation for prod-like envs (staging/production) ---
    def _require(name: str):
        val = os.getenv(name) or app.config.get(name)
        if not val:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return val

    env_key = (os.getenv("APP_ENV", "development") or "development").lower()
    if env_key in ("staging", "production"):
        _require("SECRET_KEY")
        _require("DATABASE_URL")

    # --- Observability & Security ---
    init_logging(app)
    init_sentry(app)

    # Apply HTTPS, HSTS & CSP only in staging/production
    if env_key in ("staging", "production"):
        init_security(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory="migrations")
    csrf.init_app(app)

    # Blueprints (explicit, consistent prefixes)
    from .blueprints.main import bp as main_bp
    from .blueprints.catalog import bp as catalog_bp
    from .blueprints.jobs import bp as jobs_bp
    from .blueprints.quotation import bp as quotation_bp
    from .blueprints.projects import bp as projects_bp

    app.register_blueprint(main_bp)                           # "/"
    app.register_blueprint(catalog_bp, url_prefix="/catalog")
    app.register_blueprint(jobs_bp, url_prefix="/jobs")
    app.register_blueprint(quotation_bp, url_prefix="/quotation")
    app.register_blueprint(projects_bp, url_prefix="/projects")

    # Template globals (shared across all templates)
    from .utils.helpers import format_currency
    app.add_template_filter(format_currency, "money")

    @app.context_processor
    def inject_globals():
        return {"SITE_NAME": app.config.get("SITE_NAME", "")}

    # --- Service errors -> JSON ---
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"ok": False, "message": str(e), "errors": e.fields}), 400

    @app.errorhandler(SpreadsheetError)
    def handle_spreadsheet_error(e):
        return jsonify({"ok": False, "message": str(e), "errors": {"file": str(e)}}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found_error(e):
        return jsonify({"ok": False, "error": "not_found", "message": str(e)}), 404

    @app.errorhandler(StoreError)
    def handle_store_error(e):
        app.logger.exception("store error on %s %s", request.method, request.path)
        return jsonify({"error": "store_error"}), 500

    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        return jsonify({"ok": False, "message": str(e)}), 400

    # Error handlers (minimal)
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "not_found", "code": 404}), 404

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"ok": False, "errors": {"file": "Upload too large."}}), 413

    @app.errorhandler(500)
    def server_error(e):
        app.logger.exception("unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "server_error", "code": 500}), 500

    # CSRF error handler (clean 400 instead of generic 500)
    from flask_wtf.csrf import CSRFError
    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        return jsonify({"ok": False, "error": "csrf", "message": e.description}), 400

    # CLI commands
    from .cli import register_cli
    register_cli(app)

    return app
