from __future__ import annotations

from ..extensions import db
from sutradhar.time_utils import to_utc_z


class PointsLedgerEntry(db.Model):
    """
    Append-only ledger of reward point events.

    TRANSACTION TYPES:
    - earn: Points earned from a purchase
    - redeem: Points redeemed for a discount
    - adjust: Manual or profile-driven adjustment

    IMMUTABLE: Records are never updated or deleted.
    """
    __tablename__ = "points_ledger"
    __table_args__ = (
        db.Index("ix_points_ledger_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    type = db.Column(db.String(16), nullable=False, index=True)  # earn, redeem, adjust
    points = db.Column(db.Integer, nullable=False)  # Positive for earn, negative for redeem

    note = db.Column(db.String(255), nullable=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "points": self.points,
            "note": self.note,
            "order_id": self.order_id,
            "created_at": to_utc_z(self.created_at),
        }
