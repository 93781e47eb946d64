# ydkb/__init__.py
import os
from datetime import datetime, date as _date, timezone as _tz, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import Flask, jsonify
from dotenv import load_dotenv
from supabase import create_client
from werkzeug.exceptions import HTTPException

from .services.tiers import DEFAULT_MAX_ATTEMPTS

# Load .env as early as possible so env vars are available everywhere
load_dotenv()

# Timezone config ("today" for the daily challenge)
TIMEZONE = os.getenv("TIMEZONE", "UTC")


def get_today() -> _date:
    try:
        return datetime.now(ZoneInfo(TIMEZONE)).date()
    except ZoneInfoNotFoundError:
        return datetime.now(_tz.utc).date()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def create_app(config: Optional[dict] = None, client: Any = None) -> Flask:
    """Application factory.

    `client` lets callers inject a ready Supabase client (tests pass a fake);
    otherwise one is built from SUPABASE_URL plus a service-role or anon key.
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev")  # set a strong value in production
    app.config["APP_NAME"] = os.getenv("APP_NAME", "Y'all Don't Know Ball")
    app.config["ADMIN_TOKEN"] = os.getenv("ADMIN_TOKEN") or None

    # Guess sessions live in the cookie; keep them for a while
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=30)
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_SECURE"] = _env_flag("SESSION_COOKIE_SECURE", "1")

    # Game knobs
    app.config["COLLEGE_SEARCH_MIN_LENGTH"] = int(os.getenv("COLLEGE_SEARCH_MIN_LENGTH", "2"))
    app.config["COLLEGE_SEARCH_LIMIT"] = int(os.getenv("COLLEGE_SEARCH_LIMIT", "10"))
    app.config["CANDIDATE_POOL_LIMIT"] = int(os.getenv("CANDIDATE_POOL_LIMIT", "100"))
    app.config["MAX_ATTEMPTS"] = dict(DEFAULT_MAX_ATTEMPTS)

    if config:
        app.config.update(config)

    app.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    # Supabase client: injected, built from env, or absent (local mode)
    if client is None:
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
        if url and key:
            try:
                client = create_client(url, key)
                app.logger.info("Supabase configured.")
            except Exception as e:
                client = None
                app.logger.warning("Supabase client init failed: %s", e)
        else:
            app.logger.warning("Supabase env vars missing. Running in local/JSON mode.")
    app.extensions["supabase"] = client

    from .routes import bp as main_bp
    from .admin import bp as admin_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp)

    # API clients expect JSON even for 404/405
    @app.errorhandler(HTTPException)
    def json_http_error(e: HTTPException):
        return jsonify(error=e.description or e.name), e.code

    return app
