# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/sutradhar/routes/auth.py
"""
Authentication API routes: sign up, password sign in, session retrieval,
sign out, and role switching.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services import profile_service
from ..services.auth_service import PasswordValidationError, SignUpError
from ..services.profile_service import ProfileError
from ..models.auth import SELF_SERVICE_ROLES
from ..decorators import require_auth, bearer_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _landing_for(role: str) -> str:
    return "/seller" if role == "seller" else "/buyer"


@auth_bp.post("/signup")
def signup_route():
    """
    Create an account and its profile.

    Body: email, password, display_name?, phone?, role? (buyer|seller)
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.sign_up(
            email=email,
            password=password,
            display_name=data.get("display_name"),
            phone=data.get("phone"),
            role=data.get("role") or "buyer",
            allowed_roles=SELF_SERVICE_ROLES,
        )
        return jsonify({
            "user": user.to_dict(),
            "profile": profile_service.session_payload(user.id),
            "message": "Account created",
        }), 201

    except (PasswordValidationError, SignUpError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate with email/password and create a session token.

    The token must be sent as `Authorization: Bearer <token>`.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        profile = profile_service.session_payload(user.id)

        return jsonify({
            "user": user.to_dict(),
            "profile": profile,
            "token": token,
            "session": session.to_dict(),
            "redirect": _landing_for(profile["role"] if profile else "buyer"),
            "message": "Login successful",
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    try:
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        if not session_service.revoke_session(token):
            return jsonify({"error": "Session not found"}), 404

        return jsonify({"message": "Signed out"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/session")
@require_auth
def session_route():
    """Current user, role, points, tier and KYC status."""
    context = g.session_context
    return jsonify({
        "user": context.user.to_dict(),
        "profile": profile_service.session_payload(context.user_id),
        "session": context.session.to_dict(),
    }), 200


@auth_bp.post("/role")
@require_auth
def switch_role_route():
    data = request.get_json(silent=True) or {}
    role = data.get("role")
    if not role:
        return jsonify({"error": "role required"}), 400

    try:
        profile_service.switch_role(g.session_context.user_id, role)
    except ProfileError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to switch role")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "profile": profile_service.session_payload(g.session_context.user_id),
        "redirect": _landing_for(role.strip().lower()),
    }), 200
