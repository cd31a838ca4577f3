from __future__ import annotations

from ..extensions import db
from ..models import Profile
from ..models.auth import ROLES, SELF_SERVICE_ROLES
from .rewards_service import record_points, LEDGER_ADJUST, tier_for_points


class ProfileError(Exception):
    """Raised for rejected profile changes."""
    pass


def get_profile(user_id: int) -> Profile | None:
    return db.session.query(Profile).filter_by(user_id=user_id).first()


def session_payload(user_id: int) -> dict | None:
    """User + profile view returned to a signed-in client."""
    profile = get_profile(user_id)
    if not profile:
        return None
    data = profile.to_dict()
    data["tier"] = tier_for_points(profile.points)
    data["is_buyer"] = profile.role == "buyer"
    data["is_seller"] = profile.role == "seller"
    data["is_admin"] = profile.role == "admin"
    return data


def switch_role(user_id: int, role: str) -> Profile:
    role = (role or "").strip().lower()
    if role not in ROLES:
        raise ProfileError(f"Unknown role: {role}")
    if role not in SELF_SERVICE_ROLES:
        raise ProfileError(f"Cannot switch to role: {role}")

    profile = get_profile(user_id)
    if not profile:
        raise ProfileError("Profile not found")

    profile.role = role
    db.session.commit()
    return profile


def update_points(user_id: int, delta: int, note: str | None = None) -> Profile:
    """Write a points change through to the profile and the ledger."""
    if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
        raise ProfileError("delta must be a non-zero integer")

    record_points(user_id, delta, LEDGER_ADJUST, note=note or "Points adjustment")
    return get_profile(user_id)
