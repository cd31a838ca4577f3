# Overview: Flask API routes for the public marketplace; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import catalog_service

market_bp = Blueprint("market", __name__, url_prefix="/api/market")


@market_bp.get("/products")
def list_products():
    """
    Published products, newest first.

    Query params:
    - search: str (optional) - matches title or shop name
    - tag: str (optional, default "all") - matches any product tag
    """
    search = request.args.get("search")
    tag = request.args.get("tag", catalog_service.TAG_ALL)

    try:
        items = catalog_service.list_published_products(search=search, tag=tag)
    except Exception:
        current_app.logger.exception("Failed to load products")
        return jsonify({"error": "Could not load products, please retry", "retryable": True}), 500

    return jsonify({"items": items, "count": len(items)})


@market_bp.get("/products/<int:product_id>")
def get_product(product_id: int):
    product = catalog_service.get_product(product_id)
    if not product:
        return jsonify({"error": "Product not found"}), 404
    return jsonify(product)
