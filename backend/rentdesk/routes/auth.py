# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/rentdesk/routes/auth.py
"""
Authentication API routes

- POST /register and /login are public and return {user, token}
- /me, /password require a bearer token
- /users is admin only
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..config import ROLE_ADMIN, get_settings
from ..decorators import require_auth, require_roles
from ..errors import ApiError, AuthenticationError
from ..services import auth_service, token_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _user_payload(user) -> dict:
    return {
        **user.to_dict(),
        "permissions": get_settings().permissions_for(user.role),
    }


@auth_bp.post("/register")
def register_route():
    """
    Create a user and return it with a session token.

    Body: {"username", "email", "password", "role"?}
    """
    data = request.get_json(silent=True) or {}
    settings = get_settings()
    try:
        user = auth_service.register_user(
            username=data.get("username"),
            email=data.get("email"),
            password=data.get("password"),
            role=data.get("role"),
            settings=settings,
        )
        token = token_service.issue_token(user, settings)
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Error registering user"}), 500

    current_app.logger.info("Registered user %s (%s)", user.id, user.username)
    return jsonify({
        "message": "User registered successfully",
        "user": _user_payload(user),
        "token": token,
    }), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by username or email and return a session token.

    Body: {"login", "password"} ("username" / "email" accepted for "login")
    """
    data = request.get_json(silent=True) or {}
    identifier = data.get("login") or data.get("username") or data.get("email")
    try:
        user = auth_service.authenticate(identifier, data.get("password"))
        token = token_service.issue_token(user, get_settings())
    except AuthenticationError as e:
        current_app.logger.info("Failed login for %r: %s", identifier, type(e).__name__)
        return jsonify(e.to_dict()), e.status_code
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Error during login"}), 500

    return jsonify({
        "message": "Login successful",
        "user": _user_payload(user),
        "token": token,
    }), 200


@auth_bp.get("/me")
@require_auth
def get_profile_route():
    return jsonify({"user": _user_payload(g.current_user)}), 200


@auth_bp.put("/me")
@require_auth
def update_profile_route():
    """Update username, email and/or password of the current user."""
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.update_profile(
            g.current_user,
            get_settings(),
            username=data.get("username"),
            email=data.get("email"),
            password=data.get("password"),
        )
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update profile")
        return jsonify({"error": "Error updating user profile"}), 500

    return jsonify({
        "message": "Profile updated successfully",
        "user": _user_payload(user),
    }), 200


@auth_bp.put("/password")
@require_auth
def change_password_route():
    """Body: {"current_password", "new_password"}"""
    data = request.get_json(silent=True) or {}
    try:
        auth_service.change_password(
            g.current_user,
            data.get("current_password"),
            data.get("new_password"),
            get_settings(),
        )
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to change password")
        return jsonify({"error": "Error changing password"}), 500

    return jsonify({"message": "Password changed successfully"}), 200


@auth_bp.get("/users")
@require_auth
@require_roles(ROLE_ADMIN)
def list_users_route():
    users = auth_service.list_users()
    return jsonify({
        "count": len(users),
        "users": [user.to_dict() for user in users],
    }), 200
