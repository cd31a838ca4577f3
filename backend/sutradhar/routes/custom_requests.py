# Overview: Flask API routes for buyer custom requests.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import custom_request_service
from ..services.custom_request_service import CustomRequestError
from ..validation import ValidationError
from ..decorators import require_auth, require_role

custom_requests_bp = Blueprint("custom_requests", __name__, url_prefix="/api/buyer/custom-requests")


@custom_requests_bp.get("")
@require_auth
@require_role("buyer", "admin")
def list_requests():
    items = custom_request_service.list_requests(g.session_context.user_id)
    return jsonify({"items": items, "count": len(items)})


@custom_requests_bp.post("")
@require_auth
@require_role("buyer", "admin")
def create_request():
    payload = request.get_json(silent=True) or {}
    try:
        created = custom_request_service.create_request(g.session_context.user_id, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create custom request")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(created), 201


@custom_requests_bp.post("/<int:request_id>/accept")
@require_auth
@require_role("buyer", "admin")
def accept_quote(request_id: int):
    try:
        result = custom_request_service.accept_quote(g.session_context.user_id, request_id)
    except CustomRequestError as e:
        status = 404 if str(e) == "Custom request not found" else 409
        return jsonify({"error": str(e), "details": e.details}), status
    except Exception:
        current_app.logger.exception("Failed to accept quote")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(result), 200
