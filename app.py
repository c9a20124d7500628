import os
from pathlib import Path
from typing import Any, Optional

from flask import Flask, jsonify
from supabase import create_client

from extensions import db
import models  # noqa: F401  registers tables for create_all
from wrapped import create_wrapped_blueprint

# ====== Feature toggle ======
def _env_flag(name: str, default: bool) -> bool:
    """Parse truthy feature-toggle values from the environment."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


USE_SUPABASE = _env_flag("USE_SUPABASE", True)  # ✅ Supabase for match rows + tickets

# ====== Match Wrapped settings ======
WRAPPED_PARTY_SLUG = os.environ.get("WRAPPED_PARTY_SLUG", "meetcut-x-tsa-x-ksa-x-tcl")
WRAPPED_MATCH_TABLE = os.environ.get("WRAPPED_MATCH_TABLE", "test_matches")
WRAPPED_CSV_PATH = os.environ.get("WRAPPED_CSV_PATH")
WRAPPED_DISPLAY_TIMEZONE = os.environ.get("WRAPPED_DISPLAY_TIMEZONE", "America/New_York")

# ====== Supabase setup ======
SUPABASE_URL = os.environ.get("SUPABASE_URL")
SUPABASE_KEY = os.environ.get("SUPABASE_KEY")


def _init_supabase(app: Flask):
    if not (app.config.get("USE_SUPABASE") and SUPABASE_URL and SUPABASE_KEY):
        return None
    try:
        return create_client(SUPABASE_URL, SUPABASE_KEY)
    except Exception as e:
        app.logger.warning("⚠️ Could not init Supabase client: %s", e)
        return None


def create_app(config_overrides: Optional[dict[str, Any]] = None, clock=None) -> Flask:
    """Build the Flask app; tests pass overrides (and a fixed clock) instead of env vars."""
    app = Flask(__name__)

    app.config.setdefault("USE_SUPABASE", USE_SUPABASE)
    app.config.setdefault("WRAPPED_PARTY_SLUG", WRAPPED_PARTY_SLUG)
    app.config.setdefault("WRAPPED_MATCH_TABLE", WRAPPED_MATCH_TABLE)
    app.config.setdefault("WRAPPED_CSV_PATH", WRAPPED_CSV_PATH)
    app.config.setdefault("WRAPPED_DISPLAY_TIMEZONE", WRAPPED_DISPLAY_TIMEZONE)
    app.config.update(config_overrides or {})

    if "SUPABASE_CLIENT" not in app.config:
        app.config["SUPABASE_CLIENT"] = _init_supabase(app)

    if "SQLALCHEMY_DATABASE_URI" not in app.config:
        data_dir = Path(app.root_path) / "data"
        data_dir.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{data_dir / 'app.db'}"
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)
    db.init_app(app)

    @app.errorhandler(404)
    @app.errorhandler(405)
    @app.errorhandler(500)
    def show_json_error(err):
        status_code = getattr(err, "code", 500) or 500
        return jsonify({"error": getattr(err, "name", "Internal Server Error")}), status_code

    app.register_blueprint(create_wrapped_blueprint(clock))

    with app.app_context():
        db.create_all()

    return app


# ====== Entrypoint ======
if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=int(os.environ.get("PORT", 8080)), debug=True)
