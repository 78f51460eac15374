# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Credential store.

Passwords are hashed with bcrypt using a fresh salt per hash (bcrypt.gensalt),
so two users with the same password, or the same user changing to a password
used before, never share a stored hash. The cost factor comes from
Settings.bcrypt_rounds.

Login failures are split into UnknownLoginError (no such username/email) and
InvalidPasswordError (wrong password). Both surface as 401.
"""

import bcrypt
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from rentdesk.config import Settings
from rentdesk.errors import (
    ConflictError,
    InvalidPasswordError,
    NotFoundError,
    UnknownLoginError,
    ValidationError,
)
from rentdesk.time_utils import utcnow
from rentdesk.validation import validate_email, validate_password, validate_username


def hash_password(password: str, rounds: int) -> str:
    """Hash password using bcrypt with a new salt at the given cost factor."""
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for a malformed stored hash instead of raising.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def validate_user_password(user: User, candidate: str) -> bool:
    return verify_password(candidate, user.password_hash)


def set_password(user: User, password: str, settings: Settings) -> None:
    """Validate and re-hash a new password onto user (not committed)."""
    validate_password(password)
    user.password_hash = hash_password(password, settings.bcrypt_rounds)


def find_by_login(identifier: str) -> User | None:
    """User whose username OR email equals identifier."""
    if not identifier:
        return None
    return db.session.query(User).filter(
        db.or_(User.username == identifier, User.email == identifier)
    ).first()


def get_user(user_id: int) -> User | None:
    return db.session.get(User, user_id)


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.id.asc()).all()


def _ensure_available(username: str, email: str) -> None:
    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        raise ConflictError("Username or email already exists")


def register_user(
    username: str,
    email: str,
    password: str,
    settings: Settings,
    role: str | None = None,
) -> User:
    """
    Create a new user with a bcrypt-hashed password.

    Raises:
        ValidationError: bad username/email/password/role
        ConflictError: username or email already taken
    """
    username = validate_username(username)
    email = validate_email(email)
    validate_password(password)

    role = role or settings.default_role
    if role not in settings.roles:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(settings.roles)}")

    _ensure_available(username, email)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password, settings.bcrypt_rounds),
        role=role,
    )

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already exists")
    return user


def authenticate(identifier: str, password: str) -> User:
    """
    Resolve identifier (username or email) and check the password.

    Updates last_login_at on success.

    Raises:
        ValidationError: identifier or password missing
        UnknownLoginError: no matching user
        InvalidPasswordError: password mismatch
    """
    if not identifier or not password:
        raise ValidationError("Username/email and password are required")

    user = find_by_login(identifier)
    if not user:
        raise UnknownLoginError()

    if not validate_user_password(user, password):
        raise InvalidPasswordError()

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def update_profile(
    user: User,
    settings: Settings,
    *,
    username: str | None = None,
    email: str | None = None,
    password: str | None = None,
) -> User:
    """
    Update username, email and/or password.

    Uniqueness is checked against other users; a new password is re-hashed
    with a fresh salt.
    """
    if username is not None and username != user.username:
        username = validate_username(username)
        taken = db.session.query(User).filter(User.username == username, User.id != user.id).first()
        if taken:
            raise ConflictError("Username already exists")
        user.username = username

    if email is not None and email != user.email:
        email = validate_email(email)
        taken = db.session.query(User).filter(User.email == email, User.id != user.id).first()
        if taken:
            raise ConflictError("Email already exists")
        user.email = email

    if password:
        set_password(user, password, settings)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already exists")
    return user


def change_password(user: User, current_password: str, new_password: str, settings: Settings) -> User:
    if not current_password or not new_password:
        raise ValidationError("current_password and new_password are required")
    if not validate_user_password(user, current_password):
        raise InvalidPasswordError("Current password is incorrect")

    set_password(user, new_password, settings)
    db.session.commit()
    return user


def set_role(user_id: int, role: str, settings: Settings) -> User:
    if role not in settings.roles:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(settings.roles)}")
    user = get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    user.role = role
    db.session.commit()
    return user
