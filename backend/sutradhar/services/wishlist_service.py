from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import WishlistEntry, Product


class WishlistError(Exception):
    """Raised for wishlist operation errors."""
    pass


@dataclass
class Wishlist:
    user_id: int | None
    entries: list[WishlistEntry] = field(default_factory=list)

    def is_in_wishlist(self, product_id: int) -> bool:
        return any(entry.product_id == product_id for entry in self.entries)

    def to_dict(self) -> dict:
        return {
            "items": [e.to_dict() for e in self.entries],
            "count": len(self.entries),
        }


def fetch_wishlist(user_id: int | None) -> Wishlist:
    if not user_id:
        return Wishlist(user_id=None)

    entries = (
        db.session.query(WishlistEntry)
        .options(joinedload(WishlistEntry.product).joinedload(Product.seller))
        .filter(WishlistEntry.user_id == user_id)
        .order_by(WishlistEntry.created_at.desc(), WishlistEntry.id.desc())
        .all()
    )
    return Wishlist(user_id=user_id, entries=entries)


def add_to_wishlist(user_id: int, product_id: int) -> bool:
    """
    Save a product. Adding one that is already saved is a success: the
    unique (user_id, product_id) violation is absorbed.
    """
    if not db.session.query(Product.id).filter_by(id=product_id, published=True).first():
        raise WishlistError("Product not found")

    try:
        db.session.add(WishlistEntry(user_id=user_id, product_id=product_id))
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error adding product %s to wishlist", product_id)
        return False
    return True


def remove_from_wishlist(user_id: int, product_id: int) -> bool:
    try:
        db.session.query(WishlistEntry).filter_by(
            user_id=user_id, product_id=product_id
        ).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error removing product %s from wishlist", product_id)
        return False
    return True
