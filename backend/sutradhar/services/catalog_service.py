# backend/sutradhar/services/catalog_service.py
"""
Catalog Service

Buyers read published products joined with their seller's shop details.
Search and tag filtering run over the fetched list, not in SQL; there is
no pagination.

Sellers register one shop and manage their own products through the
validation policy below.
"""
from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Product, Seller
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
)

TAG_ALL = "all"

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "title", "description", "price", "stock", "photos", "tags", "variants",
        "eco_badge", "cultural_badge", "story_text", "story_audio_url",
        "story_language", "published",
    },
    required_on_create={"title", "price"},
)

SELLER_POLICY = ModelValidationPolicy(
    writable_fields={"shop_name", "bio", "region", "eco_badge", "cultural_badge"},
    required_on_create={"shop_name"},
)


def matches_search(product: dict, search: str | None) -> bool:
    """Case-insensitive substring match on title or shop name."""
    term = (search or "").strip().lower()
    if not term:
        return True
    if term in (product.get("title") or "").lower():
        return True
    seller = product.get("seller") or {}
    return term in (seller.get("shop_name") or "").lower()


def matches_tag(product: dict, tag: str | None) -> bool:
    """Case-insensitive substring match against any tag; "all" matches everything."""
    wanted = (tag or TAG_ALL).strip().lower()
    if not wanted or wanted == TAG_ALL:
        return True
    return any(wanted in (t or "").lower() for t in product.get("tags") or [])


def filter_products(products: list[dict], search: str | None = None, tag: str | None = TAG_ALL) -> list[dict]:
    return [p for p in products if matches_search(p, search) and matches_tag(p, tag)]


def list_published_products(search: str | None = None, tag: str | None = TAG_ALL) -> list[dict]:
    """Published products with seller summary, newest first, then filtered."""
    products = (
        db.session.query(Product)
        .options(joinedload(Product.seller))
        .filter(Product.published.is_(True))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )
    rows = [p.to_dict(include_seller=True) for p in products]
    return filter_products(rows, search=search, tag=tag)


def get_product(product_id: int) -> dict | None:
    product = (
        db.session.query(Product)
        .filter_by(id=product_id, published=True)
        .first()
    )
    return product.to_dict(include_seller=True) if product else None


def get_seller_for_user(user_id: int) -> Seller | None:
    return db.session.query(Seller).filter_by(user_id=user_id).first()


def register_seller(user_id: int, payload: dict) -> dict:
    """
    Create the seller shop for a user.

    Raises:
        ValidationError: bad payload
        ConflictError: user already has a shop
    """
    patch = validate_payload(model=Seller, payload=payload, policy=SELLER_POLICY, partial=False)

    if get_seller_for_user(user_id):
        raise ConflictError("Seller shop already exists for this user")

    seller = Seller(user_id=user_id, **patch)
    db.session.add(seller)
    db.session.commit()
    return seller.to_dict()


def list_seller_products(seller: Seller) -> list[dict]:
    products = (
        db.session.query(Product)
        .filter_by(seller_id=seller.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )
    return [p.to_dict() for p in products]


def create_product(seller: Seller, payload: dict) -> dict:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    product = Product(seller_id=seller.id, **patch)
    db.session.add(product)
    db.session.commit()
    return product.to_dict()


def update_product(seller: Seller, product_id: int, payload: dict) -> dict | None:
    """
    Patch one of the seller's products. Returns None when the product does
    not exist or belongs to another seller.
    """
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    if not patch:
        raise ValidationError("No fields to update")
    enforce_rules_product(patch)

    product = db.session.query(Product).filter_by(id=product_id, seller_id=seller.id).first()
    if not product:
        return None

    for k, v in patch.items():
        setattr(product, k, v)
    db.session.commit()
    return product.to_dict()
