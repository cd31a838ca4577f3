from __future__ import annotations

from ..extensions import db
from sutradhar.time_utils import to_utc_z


class Seller(db.Model):
    """
    Artisan shop. One per seller user.
    """
    __tablename__ = "sellers"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_sellers_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    shop_name = db.Column(db.String(255), nullable=False)
    bio = db.Column(db.Text, nullable=True)
    region = db.Column(db.String(128), nullable=True)

    verified_badge = db.Column(db.Boolean, nullable=False, default=False)
    eco_badge = db.Column(db.Boolean, nullable=False, default=False)
    cultural_badge = db.Column(db.Boolean, nullable=False, default=False)

    rating = db.Column(db.Float, nullable=False, default=0.0)
    total_sales = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", backref=db.backref("seller", uselist=False, lazy=True))

    def summary(self) -> dict:
        """The seller fields embedded in product listings."""
        return {
            "shop_name": self.shop_name,
            "verified_badge": self.verified_badge,
            "rating": self.rating,
            "region": self.region,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "shop_name": self.shop_name,
            "bio": self.bio,
            "region": self.region,
            "verified_badge": self.verified_badge,
            "eco_badge": self.eco_badge,
            "cultural_badge": self.cultural_badge,
            "rating": self.rating,
            "total_sales": self.total_sales,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(db.Model):
    """
    Seller-owned catalog item. Buyers only see rows with published=True.

    Price is in rupees. Carts and orders copy the price at the moment a line
    is added, so editing a product never changes existing carts or orders.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_published_created", "published", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Float, nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    photos = db.Column(db.JSON, nullable=False, default=list)
    tags = db.Column(db.JSON, nullable=False, default=list)
    variants = db.Column(db.JSON, nullable=True)

    eco_badge = db.Column(db.Boolean, nullable=False, default=False)
    cultural_badge = db.Column(db.Boolean, nullable=False, default=False)

    story_text = db.Column(db.Text, nullable=True)
    story_audio_url = db.Column(db.String(512), nullable=True)
    story_language = db.Column(db.String(16), nullable=False, default="en")

    published = db.Column(db.Boolean, nullable=False, default=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    seller = db.relationship("Seller", backref=db.backref("products", lazy=True))

    def to_dict(self, include_seller: bool = False) -> dict:
        data = {
            "id": self.id,
            "seller_id": self.seller_id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "stock": self.stock,
            "photos": list(self.photos or []),
            "tags": list(self.tags or []),
            "variants": self.variants,
            "eco_badge": self.eco_badge,
            "cultural_badge": self.cultural_badge,
            "story_text": self.story_text,
            "story_audio_url": self.story_audio_url,
            "story_language": self.story_language,
            "published": self.published,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_seller:
            data["seller"] = self.seller.summary() if self.seller else None
        return data
