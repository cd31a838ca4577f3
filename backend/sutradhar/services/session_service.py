# Overview: Bearer session tokens for signed-in buyers, sellers and admins.

"""
Session Service

The client holds a random token; the database holds only its SHA-256
digest. A session ends when it is revoked (sign out), 24 hours after it
was issued, or after 2 hours without a request. A token that validates
yields a SessionContext with the user and profile, and routes read the
user id and role from it.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from ..extensions import db
from ..models import SessionToken, User, Profile
from sutradhar.time_utils import utcnow


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)

TOKEN_BYTES = 32


@dataclass
class SessionContext:
    """The signed-in user as seen by a request."""
    user: User
    session: SessionToken
    profile: Profile

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def role(self) -> str:
        return self.profile.role


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Digest stored in session_tokens.token_hash. Plain SHA-256; tokens are random."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """Issue a token for the user. Returns (row, plaintext token)."""
    if db.session.get(User, user_id) is None:
        raise ValueError("User not found")

    token = generate_token()
    issued = utcnow()
    row = SessionToken(
        user_id=user_id,
        token_hash=hash_token(token),
        created_at=issued,
        last_used_at=issued,
        expires_at=issued + SESSION_ABSOLUTE_TIMEOUT,
        is_revoked=False,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    db.session.add(row)
    db.session.commit()
    return row, token


def _end(row: SessionToken, reason: str) -> None:
    row.is_revoked = True
    row.revoked_at = utcnow()
    row.revoked_reason = reason
    db.session.commit()


def _find_live(token: str) -> SessionToken | None:
    return (
        db.session.query(SessionToken)
        .filter(SessionToken.token_hash == hash_token(token))
        .filter(SessionToken.is_revoked.is_(False))
        .first()
    )


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token, or None when it cannot be used.

    Idle sessions and sessions of deactivated users are revoked on the way
    out. A successful call counts as activity.
    """
    row = _find_live(token)
    if row is None:
        return None

    now = utcnow()
    if now >= row.expires_at:
        return None
    if now - row.last_used_at > SESSION_IDLE_TIMEOUT:
        _end(row, "Idle timeout")
        return None

    user = row.user
    if user is None or not user.is_active:
        _end(row, "User account deactivated")
        return None
    if user.profile is None:
        return None

    row.last_used_at = now
    db.session.commit()
    return SessionContext(user=user, session=row, profile=user.profile)


def revoke_session(token: str, reason: str = "User sign out") -> bool:
    """Sign out. False when the token is unknown or already ended."""
    row = _find_live(token)
    if row is None:
        return False
    _end(row, reason)
    return True
