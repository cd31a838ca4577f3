"""
Rewards Service - points ledger, tiers and redemption.

Ledger invariants:
- points_ledger is append-only; rows are never updated or deleted.
- Profile.points is a running total of the user's ledger rows. Every ledger
  write goes through record_points(), which moves the counter in the same
  transaction. reconcile_balance() rebuilds the counter from the ledger.
- Redemption: 5 points = ₹1, multiples of 25, at most 2000 points per
  redemption and never more than the balance.
"""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import func

from ..extensions import db
from ..models import PointsLedgerEntry, Profile
from sutradhar.time_utils import utcnow, to_utc_z


LEDGER_EARN = "earn"
LEDGER_REDEEM = "redeem"
LEDGER_ADJUST = "adjust"
LEDGER_TYPES = (LEDGER_EARN, LEDGER_REDEEM, LEDGER_ADJUST)

TIER_BRONZE = "Bronze"
TIER_SILVER = "Silver"
TIER_GOLD = "Gold"

# (minimum points, tier), highest first
TIER_THRESHOLDS = (
    (1000, TIER_GOLD),
    (500, TIER_SILVER),
    (0, TIER_BRONZE),
)

# Displayed earn multipliers per tier
TIER_BENEFITS = {TIER_BRONZE: 1.0, TIER_SILVER: 1.2, TIER_GOLD: 1.5}

POINTS_PER_RUPEE = 5
REDEEM_STEP = 25
MAX_REDEEM_POINTS = 2000
REDEMPTION_VALIDITY_DAYS = 30


class RewardsError(Exception):
    """Raised for rejected point operations."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def tier_for_points(points: int) -> str:
    for minimum, tier in TIER_THRESHOLDS:
        if points >= minimum:
            return tier
    return TIER_BRONZE


def tier_progress(points: int) -> dict:
    """Current tier, next tier, percent of the way there, and points still needed."""
    points = max(points, 0)
    if points < 500:
        return {"current": TIER_BRONZE, "next": TIER_SILVER,
                "progress": points / 500 * 100, "needed": 500 - points}
    if points < 1000:
        return {"current": TIER_SILVER, "next": TIER_GOLD,
                "progress": (points - 500) / 500 * 100, "needed": 1000 - points}
    return {"current": TIER_GOLD, "next": None, "progress": 100.0, "needed": 0}


def max_redeemable(balance: int) -> int:
    return max(min(balance, MAX_REDEEM_POINTS), 0)


def redemption_value(points: int) -> int:
    """Rupee value of a redemption."""
    return points // POINTS_PER_RUPEE


def _get_profile(user_id: int) -> Profile:
    profile = db.session.query(Profile).filter_by(user_id=user_id).first()
    if not profile:
        raise RewardsError("Profile not found")
    return profile


def record_points(
    user_id: int,
    points: int,
    entry_type: str,
    note: str | None = None,
    order_id: int | None = None,
    commit: bool = True,
) -> PointsLedgerEntry:
    """
    Append one ledger row and move the profile balance by the same amount.

    commit=False leaves the caller's transaction open (checkout uses this).
    """
    if entry_type not in LEDGER_TYPES:
        raise RewardsError(f"Unknown ledger entry type: {entry_type}")

    profile = _get_profile(user_id)
    new_balance = profile.points + points
    if new_balance < 0:
        raise RewardsError(
            "Insufficient points",
            details={"balance": profile.points, "requested": -points},
        )

    entry = PointsLedgerEntry(
        user_id=user_id,
        type=entry_type,
        points=points,
        note=note,
        order_id=order_id,
    )
    db.session.add(entry)

    profile.points = new_balance
    profile.tier = tier_for_points(new_balance)

    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return entry


def redeem_points(user_id: int, points: int) -> dict:
    """
    Convert points into a discount value.

    Writes a negative redeem entry and decrements the balance by exactly
    `points`. The 30-day validity is informational only.
    """
    if isinstance(points, bool) or not isinstance(points, int):
        raise RewardsError("points must be an integer")
    if points <= 0:
        raise RewardsError("points must be greater than zero")
    if points % REDEEM_STEP != 0:
        raise RewardsError(f"points must be a multiple of {REDEEM_STEP}")

    profile = _get_profile(user_id)
    cap = max_redeemable(profile.points)
    if points > cap:
        raise RewardsError(
            f"Cannot redeem more than {cap} points",
            details={"balance": profile.points, "max_redeemable": cap},
        )

    value = redemption_value(points)
    record_points(
        user_id,
        -points,
        LEDGER_REDEEM,
        note=f"Redeemed {points} points for ₹{value} discount",
    )

    return {
        "points_redeemed": points,
        "discount_value": value,
        "balance": profile.points,
        "tier": profile.tier,
        "valid_until": to_utc_z(utcnow() + timedelta(days=REDEMPTION_VALIDITY_DAYS)),
    }


def points_history(user_id: int, limit: int = 10) -> list[dict]:
    entries = (
        db.session.query(PointsLedgerEntry)
        .filter_by(user_id=user_id)
        .order_by(PointsLedgerEntry.created_at.desc(), PointsLedgerEntry.id.desc())
        .limit(limit)
        .all()
    )
    return [e.to_dict() for e in entries]


def ledger_balance(user_id: int) -> int:
    total = (
        db.session.query(func.coalesce(func.sum(PointsLedgerEntry.points), 0))
        .filter(PointsLedgerEntry.user_id == user_id)
        .scalar()
    )
    return int(total)


def reconcile_balance(user_id: int) -> dict:
    """Reset the profile counter to the ledger sum. Returns before/after."""
    profile = _get_profile(user_id)
    before = profile.points
    after = ledger_balance(user_id)
    profile.points = after
    profile.tier = tier_for_points(after)
    db.session.commit()
    return {"user_id": user_id, "before": before, "after": after, "changed": before != after}


def rewards_summary(user_id: int) -> dict:
    from .offers_service import available_offers

    profile = _get_profile(user_id)
    return {
        "points": profile.points,
        "tier": profile.tier,
        "tier_progress": tier_progress(profile.points),
        "tier_benefits": TIER_BENEFITS,
        "max_redeemable": max_redeemable(profile.points),
        "redeem_step": REDEEM_STEP,
        "points_per_rupee": POINTS_PER_RUPEE,
        "history": points_history(user_id),
        "offers": available_offers(),
    }
