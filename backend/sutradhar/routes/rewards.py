# Overview: Flask API routes for the buyer rewards page.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import rewards_service
from ..services.rewards_service import RewardsError
from ..decorators import require_auth, require_role

rewards_bp = Blueprint("rewards", __name__, url_prefix="/api/buyer/rewards")


@rewards_bp.get("")
@require_auth
@require_role("buyer", "admin")
def rewards_summary():
    """Balance, tier progress, recent ledger entries and live offers."""
    try:
        return jsonify(rewards_service.rewards_summary(g.session_context.user_id))
    except RewardsError as e:
        return jsonify({"error": str(e)}), 404


@rewards_bp.post("/redeem")
@require_auth
@require_role("buyer", "admin")
def redeem():
    data = request.get_json(silent=True) or {}
    if "points" not in data:
        return jsonify({"error": "points required"}), 400

    try:
        result = rewards_service.redeem_points(g.session_context.user_id, data["points"])
    except RewardsError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to redeem points")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 200
