from __future__ import annotations

from ..extensions import db
from sutradhar.time_utils import to_utc_z


ORDER_STATUS_PLACED = "placed"


class Order(db.Model):
    """
    One order per (buyer, seller) pair produced by a checkout, or one order
    for an accepted custom request.

    IMMUTABLE SNAPSHOT: `items` copies product id, title, quantity and price
    at checkout time. Later product edits never touch past orders.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_buyer_created", "buyer_id", "created_at"),
        db.Index("ix_orders_seller_created", "seller_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    buyer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False)

    items = db.Column(db.JSON, nullable=False)

    subtotal = db.Column(db.Float, nullable=False)
    discount = db.Column(db.Float, nullable=False, default=0.0)
    shipping = db.Column(db.Float, nullable=False, default=0.0)
    tax = db.Column(db.Float, nullable=False, default=0.0)
    total = db.Column(db.Float, nullable=False)

    status = db.Column(db.String(32), nullable=False, default=ORDER_STATUS_PLACED, index=True)
    payment_method = db.Column(db.String(32), nullable=True)
    payment_status = db.Column(db.String(32), nullable=False, default="pending")

    shipping_address = db.Column(db.JSON, nullable=True)
    tracking_number = db.Column(db.String(128), nullable=True)

    custom_request_id = db.Column(db.Integer, db.ForeignKey("custom_requests.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    seller = db.relationship("Seller")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "buyer_id": self.buyer_id,
            "seller_id": self.seller_id,
            "items": self.items,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
            "status": self.status,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "shipping_address": self.shipping_address,
            "tracking_number": self.tracking_number,
            "custom_request_id": self.custom_request_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
