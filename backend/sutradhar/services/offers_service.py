from __future__ import annotations

from ..extensions import db
from ..models import Offer, Order
from ..models.offers import OFFER_PERCENT, OFFER_FIXED, OFFER_TYPES
from sutradhar.time_utils import utcnow, is_past


class OfferError(Exception):
    """Promo code rejected. Nothing changes when this is raised."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def find_active_offer(code: str | None) -> Offer | None:
    """Single exact match on the upper-cased code among active offers."""
    normalized = normalize_code(code)
    if not normalized:
        return None
    return db.session.query(Offer).filter_by(code=normalized, active=True).first()


def compute_discount(offer_type: str, value: float, subtotal: float) -> float:
    """Percent or fixed discount, never more than the subtotal."""
    if offer_type == OFFER_PERCENT:
        amount = subtotal * value / 100
    elif offer_type == OFFER_FIXED:
        amount = value
    else:
        raise OfferError(f"Unknown offer type: {offer_type}")
    return max(min(amount, subtotal), 0.0)


def apply_promo_code(code: str | None, subtotal: float, buyer_id: int | None = None) -> dict:
    """
    Resolve a promo code against a cart subtotal.

    Raises OfferError for unknown/inactive codes, expired offers, carts
    under the offer's minimum, and first-order offers for returning buyers.
    """
    offer = find_active_offer(code)
    if offer is None:
        raise OfferError("Invalid promo code")

    if is_past(offer.expires_at):
        raise OfferError("Promo code has expired", details={"code": offer.code})

    if offer.min_cart_amount is not None and subtotal < offer.min_cart_amount:
        raise OfferError(
            f"Cart total must be at least ₹{offer.min_cart_amount:g} for this code",
            details={"code": offer.code, "min_cart_amount": offer.min_cart_amount},
        )

    if offer.first_order_only and buyer_id is not None:
        has_orders = db.session.query(Order.id).filter_by(buyer_id=buyer_id).first() is not None
        if has_orders:
            raise OfferError("Promo code is only valid on a first order", details={"code": offer.code})

    discount = compute_discount(offer.type, offer.value, subtotal)
    return {"code": offer.code, "discount": discount, "offer": offer.to_dict()}


def list_offers(active_only: bool = False) -> list[dict]:
    q = db.session.query(Offer)
    if active_only:
        q = q.filter_by(active=True)
    return [o.to_dict() for o in q.order_by(Offer.created_at.desc(), Offer.id.desc()).all()]


def available_offers(limit: int = 5) -> list[dict]:
    """Active offers that have not expired."""
    now = utcnow()
    offers = (
        db.session.query(Offer)
        .filter(Offer.active.is_(True))
        .filter((Offer.expires_at.is_(None)) | (Offer.expires_at > now))
        .order_by(Offer.created_at.desc(), Offer.id.desc())
        .limit(limit)
        .all()
    )
    return [o.to_dict() for o in offers]


def create_offer(data: dict) -> dict:
    code = normalize_code(data.get("code"))
    if not code:
        raise OfferError("code is required")
    offer_type = (data.get("type") or "").strip().lower()
    if offer_type not in OFFER_TYPES:
        raise OfferError(f"type must be one of: {', '.join(OFFER_TYPES)}")
    value = float(data["value"])
    if value <= 0:
        raise OfferError("value must be > 0")

    if db.session.query(Offer).filter_by(code=code).first():
        raise OfferError(f"Offer {code} already exists")

    offer = Offer(
        code=code,
        type=offer_type,
        value=value,
        min_cart_amount=data.get("min_cart_amount"),
        expires_at=data.get("expires_at"),
        first_order_only=bool(data.get("first_order_only", False)),
        active=bool(data.get("active", True)),
        seller_id=data.get("seller_id"),
    )
    db.session.add(offer)
    db.session.commit()
    return offer.to_dict()
