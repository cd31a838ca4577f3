# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service

SIGN_IN_PATH = "/auth"


def _unauthenticated(message: str):
    return jsonify({"error": message, "redirect": SIGN_IN_PATH}), 401


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1]


def require_auth(f):
    """
    Require a valid session.

    Sets:
    - g.session_context: SessionContext (user, session, profile)
    - g.current_user: the authenticated User

    Returns 401 with a redirect to the sign-in page when there is no
    usable session.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return _unauthenticated("Authentication required")

        context = session_service.validate_session(token)
        if not context:
            return _unauthenticated("Invalid or expired token")

        g.current_user = context.user
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require the profile role to be one of `roles`. Use after @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            context = getattr(g, "session_context", None)
            if context is None:
                return _unauthenticated("Authentication required")

            if context.role not in roles:
                return jsonify({
                    "error": "Forbidden",
                    "required_roles": list(roles),
                    "role": context.role,
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
