# Overview: Flask API routes for promo codes, checkout and order history.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import checkout_service, offers_service, cart_service
from ..services.checkout_service import CheckoutError, PartialCheckoutError
from ..services.offers_service import OfferError
from ..validation import ValidationError
from ..decorators import require_auth, require_role

checkout_bp = Blueprint("checkout", __name__, url_prefix="/api/buyer")


@checkout_bp.post("/promo")
@require_auth
@require_role("buyer", "admin")
def apply_promo():
    """
    Check a promo code against the current cart. Nothing is stored; the
    code is sent again with the checkout request.
    """
    data = request.get_json(silent=True) or {}
    code = data.get("code")
    if not code:
        return jsonify({"error": "code required"}), 400

    user_id = g.session_context.user_id
    subtotal = cart_service.fetch_cart(user_id).total_amount
    try:
        result = offers_service.apply_promo_code(code, subtotal, buyer_id=user_id)
    except OfferError as e:
        return jsonify({"error": str(e), "details": e.details}), 400

    result["pricing"] = checkout_service.quote_checkout(user_id, promo_code=code)
    return jsonify(result), 200


@checkout_bp.get("/checkout")
@require_auth
@require_role("buyer", "admin")
def quote_checkout():
    try:
        pricing = checkout_service.quote_checkout(
            g.session_context.user_id, promo_code=request.args.get("promo_code")
        )
    except OfferError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    return jsonify(pricing), 200


@checkout_bp.post("/checkout")
@require_auth
@require_role("buyer", "admin")
def place_order():
    """
    Place one order per seller in the cart.

    Body: shipping_address (required), promo_code?, payment_method?
    """
    data = request.get_json(silent=True) or {}
    try:
        result = checkout_service.place_order(
            g.session_context.user_id,
            data.get("shipping_address"),
            promo_code=data.get("promo_code"),
            payment_method=data.get("payment_method") or "card",
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except OfferError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except PartialCheckoutError as e:
        return jsonify({"error": str(e), "details": e.details, "partial": True}), 409
    except CheckoutError as e:
        return jsonify({"error": str(e), "details": e.details, "retryable": True}), 500
    except Exception:
        current_app.logger.exception("Failed to place order")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 201


@checkout_bp.get("/orders")
@require_auth
@require_role("buyer", "admin")
def list_orders():
    orders = checkout_service.list_buyer_orders(g.session_context.user_id)
    return jsonify({"items": orders, "count": len(orders)})
