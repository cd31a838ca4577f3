# Overview: Flask API routes for the buyer cart; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import cart_service
from ..services.cart_service import CartError, CartLineNotFoundError
from ..decorators import require_auth, require_role

cart_bp = Blueprint("cart", __name__, url_prefix="/api/buyer/cart")


def _cart_response(status: int = 200):
    cart = cart_service.fetch_cart(g.session_context.user_id)
    return jsonify(cart.to_dict()), status


def _write_failed():
    return jsonify({"error": "Could not update cart, please retry", "retryable": True}), 500


@cart_bp.get("")
@require_auth
@require_role("buyer", "admin")
def get_cart():
    return _cart_response()


@cart_bp.post("")
@require_auth
@require_role("buyer", "admin")
def add_to_cart():
    data = request.get_json(silent=True) or {}
    product_id = data.get("product_id")
    if not product_id:
        return jsonify({"error": "product_id required"}), 400

    try:
        line = cart_service.add_to_cart(
            g.session_context.user_id,
            product_id,
            quantity=data.get("quantity", 1),
            variant_id=data.get("variant_id"),
        )
    except CartError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to add to cart")
        return jsonify({"error": "Internal server error"}), 500

    if line is None:
        return _write_failed()
    return _cart_response(201)


@cart_bp.patch("/<int:line_id>")
@require_auth
@require_role("buyer", "admin")
def update_quantity(line_id: int):
    data = request.get_json(silent=True) or {}
    if "quantity" not in data:
        return jsonify({"error": "quantity required"}), 400

    try:
        ok = cart_service.update_quantity(g.session_context.user_id, line_id, data["quantity"])
    except CartLineNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except CartError as e:
        return jsonify({"error": str(e)}), 400

    if not ok:
        return _write_failed()
    return _cart_response()


@cart_bp.delete("/<int:line_id>")
@require_auth
@require_role("buyer", "admin")
def remove_item(line_id: int):
    try:
        ok = cart_service.remove_item(g.session_context.user_id, line_id)
    except CartLineNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    if not ok:
        return _write_failed()
    return _cart_response()


@cart_bp.delete("")
@require_auth
@require_role("buyer", "admin")
def clear_cart():
    if not cart_service.clear_cart(g.session_context.user_id):
        return _write_failed()
    return jsonify({"items": [], "total_amount": 0, "item_count": 0})
