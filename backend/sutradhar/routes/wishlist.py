# Overview: Flask API routes for the buyer wishlist; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..services import wishlist_service
from ..services.wishlist_service import WishlistError
from ..decorators import require_auth, require_role

wishlist_bp = Blueprint("wishlist", __name__, url_prefix="/api/buyer/wishlist")


@wishlist_bp.get("")
@require_auth
@require_role("buyer", "admin")
def get_wishlist():
    wishlist = wishlist_service.fetch_wishlist(g.session_context.user_id)
    product_id = request.args.get("product_id", type=int)
    data = wishlist.to_dict()
    if product_id is not None:
        data["contains"] = wishlist.is_in_wishlist(product_id)
    return jsonify(data)


@wishlist_bp.post("")
@require_auth
@require_role("buyer", "admin")
def add_to_wishlist():
    data = request.get_json(silent=True) or {}
    product_id = data.get("product_id")
    if not product_id:
        return jsonify({"error": "product_id required"}), 400

    try:
        ok = wishlist_service.add_to_wishlist(g.session_context.user_id, product_id)
    except WishlistError as e:
        return jsonify({"error": str(e)}), 404

    if not ok:
        return jsonify({"error": "Could not update wishlist, please retry", "retryable": True}), 500
    return jsonify(wishlist_service.fetch_wishlist(g.session_context.user_id).to_dict()), 200


@wishlist_bp.delete("/<int:product_id>")
@require_auth
@require_role("buyer", "admin")
def remove_from_wishlist(product_id: int):
    if not wishlist_service.remove_from_wishlist(g.session_context.user_id, product_id):
        return jsonify({"error": "Could not update wishlist, please retry", "retryable": True}), 500
    return jsonify(wishlist_service.fetch_wishlist(g.session_context.user_id).to_dict()), 200
