from __future__ import annotations

from ..extensions import db
from sutradhar.time_utils import to_utc_z


class CartLine(db.Model):
    """
    One product in a buyer's cart.

    price_at_add is frozen when the line is created and is the line price
    through checkout, whatever happens to Product.price afterwards.
    """
    __tablename__ = "carts"
    __table_args__ = (
        db.Index("ix_carts_user_product", "user_id", "product_id"),
        db.CheckConstraint("quantity >= 1", name="ck_carts_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    variant_id = db.Column(db.String(64), nullable=True)

    quantity = db.Column(db.Integer, nullable=False, default=1)
    price_at_add = db.Column(db.Float, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product")

    @property
    def line_total(self) -> float:
        return self.price_at_add * self.quantity

    def to_dict(self) -> dict:
        product = self.product
        return {
            "id": self.id,
            "user_id": self.user_id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "quantity": self.quantity,
            "price_at_add": self.price_at_add,
            "line_total": self.line_total,
            "created_at": to_utc_z(self.created_at),
            "product": {
                "title": product.title,
                "photos": list(product.photos or []),
                "stock": product.stock,
                "seller_id": product.seller_id,
            } if product else None,
        }


class WishlistEntry(db.Model):
    """Saved product. (user_id, product_id) is unique; re-adding is a no-op."""
    __tablename__ = "wishlists"
    __table_args__ = (
        db.UniqueConstraint("user_id", "product_id", name="uq_wishlists_user_product"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        product = self.product
        return {
            "id": self.id,
            "user_id": self.user_id,
            "product_id": self.product_id,
            "created_at": to_utc_z(self.created_at),
            "product": {
                "id": product.id,
                "title": product.title,
                "price": product.price,
                "photos": list(product.photos or []),
                "seller": {"shop_name": product.seller.shop_name} if product.seller else None,
            } if product else None,
        }
