from __future__ import annotations

from ..extensions import db
from sutradhar.time_utils import to_utc_z


OFFER_PERCENT = "percent"
OFFER_FIXED = "fixed"
OFFER_TYPES = (OFFER_PERCENT, OFFER_FIXED)


class Offer(db.Model):
    """
    Promo code.

    `value` is a percentage for percent offers and rupees for fixed offers.
    Codes are stored upper case; lookups upper-case the input.
    """
    __tablename__ = "offers"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_offers_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False, index=True)

    type = db.Column(db.String(16), nullable=False)  # percent, fixed
    value = db.Column(db.Float, nullable=False)

    min_cart_amount = db.Column(db.Float, nullable=True)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True)
    first_order_only = db.Column(db.Boolean, nullable=False, default=False)

    active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "type": self.type,
            "value": self.value,
            "min_cart_amount": self.min_cart_amount,
            "expires_at": to_utc_z(self.expires_at) if self.expires_at else None,
            "first_order_only": self.first_order_only,
            "active": self.active,
            "seller_id": self.seller_id,
            "created_at": to_utc_z(self.created_at),
        }
