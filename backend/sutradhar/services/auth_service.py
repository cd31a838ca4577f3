# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Email/password identities with bcrypt hashing. Signing up creates the
auth user and its storefront profile together.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, at least one letter and one digit
- Session tokens managed separately (see session_service.py)
"""

import re

import bcrypt

from ..extensions import db
from ..models import User, Profile
from ..models.auth import ROLES, ROLE_BUYER
from sutradhar.time_utils import utcnow


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class SignUpError(Exception):
    """Raised when an account cannot be created (bad email, duplicate, bad role)."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def sign_up(
    email: str,
    password: str,
    display_name: str | None = None,
    phone: str | None = None,
    role: str = ROLE_BUYER,
    allowed_roles: tuple[str, ...] = ROLES,
) -> User:
    """
    Create auth user + profile.

    The public sign-up route narrows allowed_roles to buyer and seller.

    Raises:
        SignUpError: invalid email, unknown role, or email already registered
        PasswordValidationError: weak password
    """
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise SignUpError("A valid email is required")

    role = (role or ROLE_BUYER).strip().lower()
    if role not in ROLES:
        raise SignUpError(f"Unknown role: {role}")
    if role not in allowed_roles:
        raise SignUpError(f"Role not available at sign up: {role}")

    existing = db.session.query(User).filter_by(email=email).first()
    if existing:
        raise SignUpError("An account with this email already exists")

    password_hash = hash_password(password)

    user = User(email=email, password_hash=password_hash)
    db.session.add(user)
    db.session.flush()

    profile = Profile(
        user_id=user.id,
        display_name=(display_name or "").strip() or None,
        phone=(phone or "").strip() or None,
        role=role,
    )
    db.session.add(profile)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate with email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    email = (email or "").strip().lower()
    user = db.session.query(User).filter(
        User.email == email,
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user
