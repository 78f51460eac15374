# backend/rentdesk/config.py
from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
from typing import Mapping

from flask import current_app


ROLE_ADMIN = "admin"
ROLE_USER = "user"

# Declared per-role permission strings. Returned to clients for UI filtering;
# route access is gated on the role name only.
DEFAULT_ROLE_PERMISSIONS = {
    ROLE_ADMIN: ("create:any", "read:any", "update:any", "delete:any"),
    ROLE_USER: ("read:own", "update:own"),
}

_DEV_JWT_SECRET = "dev-jwt-secret-change-me"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: str) -> timedelta:
    """
    Parse a token lifetime such as "1d", "12h", "30m" or "3600".

    A bare number is a count of seconds.
    """
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def _get_env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> list[str]:
    value = os.environ.get(name)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    APP_ENV = os.environ.get("APP_ENV", "development").strip().lower()

    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/rentdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///rentdesk.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Token signing
    JWT_SECRET = os.environ.get("JWT_SECRET")
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRATION = os.environ.get("JWT_EXPIRATION", "1d")

    # bcrypt cost factor
    BCRYPT_ROUNDS = _get_env_int("BCRYPT_ROUNDS", 10)

    # Document blobs
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "uploads")
    MAX_UPLOAD_FILES = _get_env_int("MAX_UPLOAD_FILES", 10)
    MAX_CONTENT_LENGTH = _get_env_int("MAX_CONTENT_LENGTH", 10 * 1024 * 1024)
    ALLOWED_DOCUMENT_EXTENSIONS = _get_env_list(
        "ALLOWED_DOCUMENT_EXTENSIONS",
        default=["pdf", "png", "jpg", "jpeg", "gif", "doc", "docx", "xls", "xlsx", "csv", "txt"],
    )

    CORS_ORIGINS = _get_env_list(
        "CORS_ORIGINS",
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    """
    Process-wide, read-only settings derived from the Flask config once at
    startup. Components receive this object instead of reading the
    environment themselves.
    """
    jwt_secret: str
    jwt_algorithm: str
    token_lifetime: timedelta
    bcrypt_rounds: int
    upload_folder: str
    max_upload_files: int
    allowed_extensions: frozenset[str]
    roles: tuple[str, ...] = (ROLE_ADMIN, ROLE_USER)
    default_role: str = ROLE_USER
    role_permissions: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_ROLE_PERMISSIONS))
    )

    def permissions_for(self, role: str) -> list[str]:
        return list(self.role_permissions.get(role, ()))


def build_settings(config: Mapping) -> Settings:
    """
    Build Settings from a Flask config mapping.

    Raises RuntimeError in production when JWT_SECRET is missing.
    """
    secret = config.get("JWT_SECRET")
    if not secret:
        if config.get("APP_ENV") == "production":
            raise RuntimeError(
                "JWT_SECRET environment variable is required in production. "
                "Set a strong random value before starting the app."
            )
        secret = _DEV_JWT_SECRET
        warnings.warn(
            "JWT_SECRET is not set. Using insecure development fallback key.",
            RuntimeWarning,
            stacklevel=2,
        )

    rounds = int(config.get("BCRYPT_ROUNDS", 10))
    if not 4 <= rounds <= 31:
        raise RuntimeError("BCRYPT_ROUNDS must be between 4 and 31")

    upload_folder = os.path.abspath(config.get("UPLOAD_FOLDER", "uploads"))

    return Settings(
        jwt_secret=secret,
        jwt_algorithm=config.get("JWT_ALGORITHM", "HS256"),
        token_lifetime=parse_duration(str(config.get("JWT_EXPIRATION", "1d"))),
        bcrypt_rounds=rounds,
        upload_folder=upload_folder,
        max_upload_files=int(config.get("MAX_UPLOAD_FILES", 10)),
        allowed_extensions=frozenset(
            ext.lower().lstrip(".") for ext in config.get("ALLOWED_DOCUMENT_EXTENSIONS", ())
        ),
    )


def get_settings() -> Settings:
    """Settings of the current application."""
    return current_app.extensions["rentdesk.settings"]
