"""
Checkout Service - splits a cart into one order per seller.

PRICING (whole cart, evaluated once):
- subtotal = sum(price_at_add * quantity)
- shipping = 0 when subtotal > FREE_SHIPPING_THRESHOLD, else SHIPPING_FEE
- tax = subtotal * TAX_RATE
- total = subtotal - discount + shipping + tax
- points earned = floor(total / POINTS_PER_RUPEE_DIVISOR)

ALLOCATION (per seller):
- discount and tax are split in proportion to the seller's share of the
  subtotal
- shipping is split equally between sellers, whatever their share

ATOMICITY:
- CHECKOUT_ATOMIC=True: all seller orders, the cart delete and the points
  entry commit together or not at all.
- CHECKOUT_ATOMIC=False: seller orders commit one at a time. A failure after
  the first commit raises PartialCheckoutError with the ids already placed;
  those orders are not rolled back. Once every order is in, the cart delete
  and the points award still run; if either fails the buyer gets a
  PartialCheckoutError naming every placed order and the failed steps.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Order
from ..models.orders import ORDER_STATUS_PLACED
from ..validation import ValidationError
from .cart_service import fetch_cart, clear_cart
from .offers_service import apply_promo_code
from .rewards_service import record_points, LEDGER_EARN


class CheckoutError(Exception):
    """Raised when an order could not be placed. Nothing was written."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class PartialCheckoutError(CheckoutError):
    """Some seller orders were committed before a later one failed."""
    def __init__(
        self,
        message: str,
        placed_order_ids: list[int],
        failed_seller_id: int | None = None,
        failed_steps: list[str] | None = None,
    ):
        failed_steps = failed_steps or ["order"]
        super().__init__(message, details={
            "placed_order_ids": placed_order_ids,
            "failed_seller_id": failed_seller_id,
            "failed_steps": failed_steps,
        })
        self.placed_order_ids = placed_order_ids
        self.failed_seller_id = failed_seller_id
        self.failed_steps = failed_steps


@dataclass(frozen=True)
class CheckoutLine:
    product_id: int
    seller_id: int
    title: str
    quantity: int
    price_at_add: float

    @property
    def line_total(self) -> float:
        return self.price_at_add * self.quantity


@dataclass(frozen=True)
class CartPricing:
    subtotal: float
    discount: float
    shipping: float
    tax: float
    total: float
    points_earned: int


@dataclass
class SellerOrderDraft:
    seller_id: int
    items: list[dict] = field(default_factory=list)
    subtotal: float = 0.0
    discount: float = 0.0
    shipping: float = 0.0
    tax: float = 0.0
    total: float = 0.0


def price_cart(
    subtotal: float,
    discount: float = 0.0,
    *,
    shipping_fee: float = 200.0,
    free_shipping_threshold: float = 5000.0,
    tax_rate: float = 0.05,
    points_divisor: int = 100,
) -> CartPricing:
    shipping = 0.0 if subtotal > free_shipping_threshold else shipping_fee
    tax = subtotal * tax_rate
    total = subtotal - discount + shipping + tax
    points = max(math.floor(total / points_divisor), 0)
    return CartPricing(
        subtotal=subtotal,
        discount=discount,
        shipping=shipping,
        tax=tax,
        total=total,
        points_earned=points,
    )


def group_lines_by_seller(lines: list[CheckoutLine]) -> dict[int, list[CheckoutLine]]:
    """Seller id -> lines, sellers in the order they first appear."""
    groups: dict[int, list[CheckoutLine]] = {}
    for line in lines:
        groups.setdefault(line.seller_id, []).append(line)
    return groups


def split_by_seller(lines: list[CheckoutLine], pricing: CartPricing) -> list[SellerOrderDraft]:
    groups = group_lines_by_seller(lines)
    seller_count = len(groups)
    drafts = []

    for seller_id, seller_lines in groups.items():
        order_subtotal = sum(line.line_total for line in seller_lines)
        share = order_subtotal / pricing.subtotal if pricing.subtotal else 0.0
        order_discount = pricing.discount * share
        order_tax = pricing.tax * share
        order_shipping = pricing.shipping / seller_count

        drafts.append(SellerOrderDraft(
            seller_id=seller_id,
            items=[
                {
                    "product_id": line.product_id,
                    "title": line.title,
                    "quantity": line.quantity,
                    "price": line.price_at_add,
                }
                for line in seller_lines
            ],
            subtotal=order_subtotal,
            discount=order_discount,
            shipping=order_shipping,
            tax=order_tax,
            total=order_subtotal - order_discount + order_shipping + order_tax,
        ))

    return drafts


def _insert_seller_order(
    buyer_id: int,
    draft: SellerOrderDraft,
    shipping_address: str,
    payment_method: str,
) -> Order:
    order = Order(
        buyer_id=buyer_id,
        seller_id=draft.seller_id,
        items=draft.items,
        subtotal=draft.subtotal,
        discount=draft.discount,
        shipping=draft.shipping,
        tax=draft.tax,
        total=draft.total,
        shipping_address={"address": shipping_address},
        payment_method=payment_method,
        status=ORDER_STATUS_PLACED,
    )
    db.session.add(order)
    db.session.flush()
    return order


def _pricing_for(subtotal: float, discount: float) -> CartPricing:
    config = current_app.config
    return price_cart(
        subtotal,
        discount,
        shipping_fee=config["SHIPPING_FEE"],
        free_shipping_threshold=config["FREE_SHIPPING_THRESHOLD"],
        tax_rate=config["TAX_RATE"],
        points_divisor=config["POINTS_PER_RUPEE_DIVISOR"],
    )


def quote_checkout(buyer_id: int, promo_code: str | None = None) -> dict:
    """Totals the buyer would pay right now, without writing anything."""
    cart = fetch_cart(buyer_id)
    discount = 0.0
    if promo_code:
        discount = apply_promo_code(promo_code, cart.total_amount, buyer_id)["discount"]
    return asdict(_pricing_for(cart.total_amount, discount))


def place_order(
    buyer_id: int,
    shipping_address: str | None,
    promo_code: str | None = None,
    payment_method: str = "card",
) -> dict:
    """
    Turn the buyer's cart into seller orders, clear the cart, award points.

    Raises:
        ValidationError: blank address or empty cart
        OfferError: promo code rejected
        CheckoutError / PartialCheckoutError: write failures
    """
    address = (shipping_address or "").strip()
    if not address:
        raise ValidationError("Shipping address is required")

    cart = fetch_cart(buyer_id)
    if not cart.lines:
        raise ValidationError("Cart is empty")

    discount = 0.0
    if promo_code:
        discount = apply_promo_code(promo_code, cart.total_amount, buyer_id)["discount"]

    pricing = _pricing_for(cart.total_amount, discount)
    lines = [
        CheckoutLine(
            product_id=line.product_id,
            seller_id=line.product.seller_id,
            title=line.product.title,
            quantity=line.quantity,
            price_at_add=line.price_at_add,
        )
        for line in cart.lines
    ]
    drafts = split_by_seller(lines, pricing)

    if current_app.config["CHECKOUT_ATOMIC"]:
        orders = _place_atomic(buyer_id, drafts, pricing, address, payment_method)
    else:
        orders = _place_sequential(buyer_id, drafts, pricing, address, payment_method)

    current_app.logger.info(
        "Buyer %s placed %d order(s) totalling %.2f, earned %d points",
        buyer_id, len(orders), pricing.total, pricing.points_earned,
    )

    return {
        "orders": [o.to_dict() for o in orders],
        "pricing": asdict(pricing),
        "points_earned": pricing.points_earned,
        "seller_count": len(drafts),
    }


def _award_points(buyer_id: int, pricing: CartPricing, orders: list[Order], commit: bool) -> None:
    if pricing.points_earned <= 0:
        return
    record_points(
        buyer_id,
        pricing.points_earned,
        LEDGER_EARN,
        note="Points earned from purchase",
        order_id=orders[0].id if len(orders) == 1 else None,
        commit=commit,
    )


def _place_atomic(buyer_id, drafts, pricing, address, payment_method) -> list[Order]:
    try:
        orders = [_insert_seller_order(buyer_id, d, address, payment_method) for d in drafts]
        if not clear_cart(buyer_id, commit=False):
            raise CheckoutError("Could not clear cart")
        _award_points(buyer_id, pricing, orders, commit=False)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Checkout failed for buyer %s", buyer_id)
        raise CheckoutError("Could not place order, nothing was charged") from exc
    except Exception:
        db.session.rollback()
        raise
    return orders


def _place_sequential(buyer_id, drafts, pricing, address, payment_method) -> list[Order]:
    orders: list[Order] = []
    for draft in drafts:
        try:
            order = _insert_seller_order(buyer_id, draft, address, payment_method)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            placed = [o.id for o in orders]
            if placed:
                current_app.logger.warning(
                    "Partial checkout for buyer %s: orders %s placed, seller %s failed",
                    buyer_id, placed, draft.seller_id,
                )
                raise PartialCheckoutError(
                    "Some seller orders were placed before a failure",
                    placed_order_ids=placed,
                    failed_seller_id=draft.seller_id,
                ) from exc
            current_app.logger.exception("Checkout failed for buyer %s", buyer_id)
            raise CheckoutError("Could not place order, nothing was charged") from exc
        orders.append(order)

    _finish_sequential(buyer_id, pricing, orders)
    return orders


def _finish_sequential(buyer_id, pricing, orders: list[Order]) -> None:
    """Clear the cart and award points after every seller order is in."""
    failed: list[str] = []
    if not clear_cart(buyer_id):
        failed.append("clear_cart")

    try:
        _award_points(buyer_id, pricing, orders, commit=True)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Could not award points to buyer %s", buyer_id)
        failed.append("award_points")

    if failed:
        placed = [o.id for o in orders]
        current_app.logger.warning(
            "Partial checkout for buyer %s: orders %s placed, %s failed",
            buyer_id, placed, ", ".join(failed),
        )
        raise PartialCheckoutError(
            "Orders were placed but checkout did not finish",
            placed_order_ids=placed,
            failed_steps=failed,
        )


def list_buyer_orders(buyer_id: int) -> list[dict]:
    orders = (
        db.session.query(Order)
        .filter_by(buyer_id=buyer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return [o.to_dict() for o in orders]


def list_seller_orders(seller_id: int) -> list[dict]:
    orders = (
        db.session.query(Order)
        .filter_by(seller_id=seller_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return [o.to_dict() for o in orders]
