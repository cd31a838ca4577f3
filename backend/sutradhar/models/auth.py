from __future__ import annotations

from ..extensions import db
from sutradhar.time_utils import to_utc_z


ROLE_BUYER = "buyer"
ROLE_SELLER = "seller"
ROLE_ADMIN = "admin"
ROLES = (ROLE_BUYER, ROLE_SELLER, ROLE_ADMIN)
# Admin accounts come from the CLI only
SELF_SERVICE_ROLES = (ROLE_BUYER, ROLE_SELLER)


class User(db.Model):
    """
    Auth identity for email/password sign in.

    Everything the storefront shows about a person (role, points, tier)
    lives on the Profile row, not here.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }


class Profile(db.Model):
    """
    Storefront profile for a user.

    `points` is a denormalized running balance. The points ledger is the
    authoritative record; rewards_service keeps the two in step and can
    rebuild the balance from the ledger.
    """
    __tablename__ = "profiles"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_profiles_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    display_name = db.Column(db.String(128), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    photo_url = db.Column(db.String(512), nullable=True)
    language = db.Column(db.String(16), nullable=False, default="en")

    role = db.Column(db.String(16), nullable=False, default=ROLE_BUYER)  # buyer, seller, admin
    points = db.Column(db.Integer, nullable=False, default=0)
    tier = db.Column(db.String(16), nullable=False, default="Bronze")  # Bronze, Silver, Gold
    kyc_status = db.Column(db.String(16), nullable=False, default="pending")
    referral_code = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", backref=db.backref("profile", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "display_name": self.display_name,
            "phone": self.phone,
            "photo_url": self.photo_url,
            "language": self.language,
            "role": self.role,
            "points": self.points,
            "tier": self.tier,
            "kyc_status": self.kyc_status,
            "referral_code": self.referral_code,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SessionToken(db.Model):
    """
    Bearer session tokens.

    SECURITY NOTES:
    - Tokens stored hashed in database (SHA-256)
    - 24-hour absolute timeout
    - 2-hour idle timeout
    - Revocable on sign out
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_active", "user_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)  # IPv6 max length

    user = db.relationship("User", backref=db.backref("session_tokens", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
