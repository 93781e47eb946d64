from functools import wraps
from hmac import compare_digest

from flask import Blueprint, current_app, jsonify, request

from . import get_today
from .services.challenge import (
    create_challenges_for_range,
    delete_challenge,
    list_recent_challenges,
)

bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def require_admin(view):
    """Guard admin actions with X-Admin-Token when ADMIN_TOKEN is configured (open otherwise)."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        token = current_app.config.get("ADMIN_TOKEN")
        if token and not compare_digest(request.headers.get("X-Admin-Token", ""), token):
            return jsonify(success=False, error="Admin token required"), 401
        return view(*args, **kwargs)
    return wrapped


def _db():
    return current_app.extensions.get("supabase")


@bp.get("/challenges")
@require_admin
def challenges():
    db = _db()
    if db is None:
        return jsonify(error="Database not configured"), 500
    limit = request.args.get("limit", 10, type=int)
    limit = max(1, min(limit or 10, 100))
    try:
        rows = list_recent_challenges(db, limit=limit)
    except Exception as e:
        current_app.logger.exception("admin: listing challenges failed")
        return jsonify(error=str(e) or "Failed to load challenges"), 500
    return jsonify(challenges=rows)


@bp.delete("/challenges/<int:challenge_id>")
@require_admin
def remove_challenge(challenge_id: int):
    db = _db()
    if db is None:
        return jsonify(error="Database not configured"), 500
    try:
        deleted = delete_challenge(db, challenge_id)
    except Exception as e:
        current_app.logger.exception("admin: delete challenge %s failed", challenge_id)
        return jsonify(success=False, error=str(e) or "Failed to delete challenge"), 500
    if not deleted:
        return jsonify(success=False, error="Challenge not found"), 404
    current_app.logger.info("admin: deleted challenge %s", challenge_id)
    return jsonify(success=True, message="Challenge deleted successfully")


@bp.post("/create-week")
@require_admin
def create_week():
    db = _db()
    if db is None:
        return jsonify(success=False, error="Database not configured"), 500
    days = request.args.get("days", 7, type=int)
    if not (1 <= days <= 31):
        return jsonify(success=False, error="days must be between 1 and 31"), 400

    try:
        summary = create_challenges_for_range(
            db, get_today(), days, pool_limit=current_app.config["CANDIDATE_POOL_LIMIT"]
        )
    except Exception as e:
        current_app.logger.exception("admin: create-week crashed")
        return jsonify(success=False, error=str(e) or "Failed to create challenges"), 500
    current_app.logger.info("admin: %s", summary["message"])
    return jsonify(success=not summary["errors"], **summary)
