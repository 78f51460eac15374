# Overview: Error taxonomy shared by services, decorators and routes.

"""
Every failure a client can observe maps to one of these classes.
Each carries the HTTP status the routes answer with.

ValidationError     400  bad or missing input, uniqueness violation
AuthenticationError 401  missing/invalid/expired token, unknown user, bad credentials
AuthorizationError  403  role not permitted
NotFoundError       404  entity, document or blob absent
InternalError       500  unexpected store or filesystem failure
"""


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation error"


class ConflictError(ValidationError):
    """Uniqueness violation (duplicate username, email, shop number)."""
    default_message = "Resource already exists"


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Authentication required"


class UnknownLoginError(AuthenticationError):
    """No user matches the supplied username or email."""
    default_message = "Authentication failed. User not found."


class InvalidPasswordError(AuthenticationError):
    """User exists but the password does not match."""
    default_message = "Authentication failed. Invalid password."


class InvalidTokenError(AuthenticationError):
    default_message = "Authentication failed. Invalid token."


class ExpiredTokenError(AuthenticationError):
    default_message = "Authentication failed. Token expired."


class AuthorizationError(ApiError):
    status_code = 403
    default_message = "Forbidden. Insufficient permissions."


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class InternalError(ApiError):
    status_code = 500
