from __future__ import annotations

from ..extensions import db
from sutradhar.time_utils import to_utc_z


STATUS_NEW = "new"
STATUS_QUOTED = "quoted"
STATUS_ACCEPTED = "accepted"
STATUS_IN_PROGRESS = "in_progress"
STATUS_SHIPPED = "shipped"
STATUS_DELIVERED = "delivered"
STATUS_CANCELLED = "cancelled"

REQUEST_STATUSES = (
    STATUS_NEW, STATUS_QUOTED, STATUS_ACCEPTED, STATUS_IN_PROGRESS,
    STATUS_SHIPPED, STATUS_DELIVERED, STATUS_CANCELLED,
)


class CustomRequest(db.Model):
    """
    Buyer brief for a bespoke piece.

    LIFECYCLE: new -> quoted -> accepted -> in_progress -> shipped -> delivered,
    cancelled from new. Only quoted -> accepted happens in this service; the
    seller side sets the rest.
    """
    __tablename__ = "custom_requests"
    __table_args__ = (
        db.Index("ix_custom_requests_buyer_created", "buyer_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    buyer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=True, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True)

    brief_text = db.Column(db.Text, nullable=False)
    brief_photos = db.Column(db.JSON, nullable=True)
    budget = db.Column(db.Float, nullable=True)
    timeline_days = db.Column(db.Integer, nullable=True)
    materials = db.Column(db.String(255), nullable=True)
    ai_preview_notes = db.Column(db.Text, nullable=True)

    quote_amount = db.Column(db.Float, nullable=True)
    quote_timeline_days = db.Column(db.Integer, nullable=True)
    quote_milestones = db.Column(db.JSON, nullable=True)

    status = db.Column(db.String(16), nullable=False, default=STATUS_NEW, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    seller = db.relationship("Seller")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "buyer_id": self.buyer_id,
            "seller_id": self.seller_id,
            "product_id": self.product_id,
            "brief_text": self.brief_text,
            "brief_photos": self.brief_photos,
            "budget": self.budget,
            "timeline_days": self.timeline_days,
            "materials": self.materials,
            "ai_preview_notes": self.ai_preview_notes,
            "quote_amount": self.quote_amount,
            "quote_timeline_days": self.quote_timeline_days,
            "quote_milestones": self.quote_milestones,
            "status": self.status,
            "seller": {
                "shop_name": self.seller.shop_name,
                "verified_badge": self.seller.verified_badge,
            } if self.seller else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
