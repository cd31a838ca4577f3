"""
Cart Service - per-buyer cart lines.

Mutations are fire-and-refetch: nothing is updated optimistically, callers
read the cart again after a write. A write that fails at the database is
rolled back and logged, prior rows stay as they were, and the function
returns False (None from add_to_cart).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import CartLine, Product


class CartError(Exception):
    """Raised for cart operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class CartLineNotFoundError(CartError):
    """The line does not exist or belongs to another buyer."""
    pass


@dataclass
class Cart:
    user_id: int | None
    lines: list[CartLine] = field(default_factory=list)

    @property
    def total_amount(self) -> float:
        return sum(line.price_at_add * line.quantity for line in self.lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "items": [line.to_dict() for line in self.lines],
            "total_amount": self.total_amount,
            "item_count": self.item_count,
        }


def fetch_cart(user_id: int | None) -> Cart:
    """Lines with their product snapshot, newest first. No user means an empty cart."""
    if not user_id:
        return Cart(user_id=None)

    lines = (
        db.session.query(CartLine)
        .options(joinedload(CartLine.product))
        .filter(CartLine.user_id == user_id)
        .order_by(CartLine.created_at.desc(), CartLine.id.desc())
        .all()
    )
    return Cart(user_id=user_id, lines=lines)


def _get_line(user_id: int, line_id: int) -> CartLine:
    line = db.session.query(CartLine).filter_by(id=line_id, user_id=user_id).first()
    if not line:
        raise CartLineNotFoundError("Cart line not found")
    return line


def add_to_cart(user_id: int, product_id: int, quantity: int = 1, variant_id: str | None = None) -> CartLine | None:
    """
    Put a product in the cart at its current price.

    An existing line for the same product and variant gets its quantity
    increased; its price_at_add is left as it was.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise CartError("quantity must be a positive integer")

    product = db.session.query(Product).filter_by(id=product_id, published=True).first()
    if not product:
        raise CartError("Product not found")

    line = db.session.query(CartLine).filter_by(
        user_id=user_id, product_id=product_id, variant_id=variant_id
    ).first()

    try:
        if line:
            line.quantity += quantity
        else:
            line = CartLine(
                user_id=user_id,
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
                price_at_add=product.price,
            )
            db.session.add(line)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error adding product %s to cart", product_id)
        return None
    return line


def remove_item(user_id: int, line_id: int) -> bool:
    line = _get_line(user_id, line_id)
    try:
        db.session.delete(line)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error removing cart line %s", line_id)
        return False
    return True


def update_quantity(user_id: int, line_id: int, quantity: int) -> bool:
    """Set a line's quantity. Zero or less removes the line."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise CartError("quantity must be an integer")

    if quantity <= 0:
        return remove_item(user_id, line_id)

    line = _get_line(user_id, line_id)
    try:
        line.quantity = quantity
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error updating quantity for cart line %s", line_id)
        return False
    return True


def clear_cart(user_id: int | None, commit: bool = True) -> bool:
    """
    Delete every line for the user.

    commit=False leaves the delete in the caller's transaction (checkout).
    """
    if not user_id:
        return False

    try:
        db.session.query(CartLine).filter_by(user_id=user_id).delete(synchronize_session=False)
        if commit:
            db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error clearing cart for user %s", user_id)
        return False
    return True
