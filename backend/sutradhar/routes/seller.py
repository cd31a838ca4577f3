# Overview: Flask API routes for the seller dashboard; shop setup, listings and incoming orders.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import catalog_service, checkout_service
from ..validation import ValidationError, ConflictError
from ..decorators import require_auth, require_role

seller_bp = Blueprint("seller", __name__, url_prefix="/api/seller")


def _no_shop():
    return jsonify({"error": "Seller shop not found", "setup_required": True}), 404


@seller_bp.post("/shop")
@require_auth
@require_role("seller", "admin")
def register_shop():
    """
    Create the seller record for the signed-in user.

    Body: shop_name (required), bio?, region?
    """
    payload = request.get_json(silent=True) or {}
    try:
        seller = catalog_service.register_seller(g.session_context.user_id, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to register seller shop")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(seller), 201


@seller_bp.get("/products")
@require_auth
@require_role("seller", "admin")
def list_products():
    seller = catalog_service.get_seller_for_user(g.session_context.user_id)
    if not seller:
        return _no_shop()
    items = catalog_service.list_seller_products(seller)
    return jsonify({"items": items, "count": len(items)})


@seller_bp.post("/products")
@require_auth
@require_role("seller", "admin")
def create_product():
    seller = catalog_service.get_seller_for_user(g.session_context.user_id)
    if not seller:
        return _no_shop()

    payload = request.get_json(silent=True) or {}
    try:
        product = catalog_service.create_product(seller, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(product), 201


@seller_bp.put("/products/<int:product_id>")
@require_auth
@require_role("seller", "admin")
def update_product(product_id: int):
    seller = catalog_service.get_seller_for_user(g.session_context.user_id)
    if not seller:
        return _no_shop()

    payload = request.get_json(silent=True) or {}
    try:
        product = catalog_service.update_product(seller, product_id, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update product %s", product_id)
        return jsonify({"error": "Internal server error"}), 500

    if product is None:
        return jsonify({"error": "Product not found"}), 404
    return jsonify(product)


@seller_bp.get("/orders")
@require_auth
@require_role("seller", "admin")
def list_orders():
    seller = catalog_service.get_seller_for_user(g.session_context.user_id)
    if not seller:
        return _no_shop()
    orders = checkout_service.list_seller_orders(seller.id)
    return jsonify({"items": orders, "count": len(orders)})
