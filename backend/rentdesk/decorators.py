# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .config import get_settings
from .errors import AuthenticationError, AuthorizationError
from .services import auth_service, token_service


def _bearer_token() -> str:
    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthenticationError("Authentication required. No token provided.")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("Authentication required. No token provided.")
    return token


def authenticate_request():
    """
    Resolve the bearer token on the current request to a User.

    Raises AuthenticationError (or a subclass) when the header is missing or
    malformed, the token is invalid or expired, or the user no longer exists.
    """
    token = _bearer_token()
    claims = token_service.verify_token(token, get_settings())

    user = auth_service.get_user(claims.id)
    if not user:
        raise AuthenticationError("Authentication failed. User not found.")
    return user, claims


def require_auth(f):
    """
    Require a valid bearer token.

    Sets on Flask g:
    - g.current_user: the authenticated User, re-read from the database
    - g.token_claims: the verified TokenClaims

    Returns 401 if:
    - No Authorization header, or not "Bearer <token>"
    - Invalid or expired token
    - The user the token names no longer exists
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            user, claims = authenticate_request()
        except AuthenticationError as e:
            return jsonify(e.to_dict()), e.status_code
        except Exception:
            current_app.logger.exception("Failed to authenticate request")
            return jsonify({"error": "Internal server error"}), 500

        g.current_user = user
        g.token_claims = claims

        return f(*args, **kwargs)

    return decorated_function


def require_roles(*roles: str):
    """
    Require the authenticated user's role to be one of roles.

    Apply below @require_auth. No roles means any authenticated user.
    The role is taken from the stored user, not the token claim, so a role
    change applies immediately.
    """
    allowed = set(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "current_user"):
                return jsonify({"error": "Authentication required."}), 401

            if allowed and g.current_user.role not in allowed:
                e = AuthorizationError()
                return jsonify({
                    **e.to_dict(),
                    "required_roles": sorted(allowed),
                }), e.status_code

            return f(*args, **kwargs)

        return decorated_function
    return decorator
