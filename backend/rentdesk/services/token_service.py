# Overview: Service-layer operations for session tokens; issues and verifies signed JWTs.

"""
Stateless session tokens.

Tokens are JWTs signed with Settings.jwt_secret and carry
{id, username, role, iat, exp}. Nothing is stored server-side, so a token
cannot be revoked before it expires; deleting the user is what invalidates
it (require_auth re-resolves the user id on every request).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from ..models import User
from rentdesk.config import Settings
from rentdesk.errors import ExpiredTokenError, InvalidTokenError


@dataclass(frozen=True)
class TokenClaims:
    id: int
    username: str
    role: str
    issued_at: datetime
    expires_at: datetime


def issue_token(user: User, settings: Settings, expires_delta: timedelta | None = None) -> str:
    """Sign a token for user; lifetime defaults to Settings.token_lifetime."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else settings.token_lifetime)

    to_encode = {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> TokenClaims:
    """
    Check signature and expiry and return the embedded claims.

    Raises:
        ExpiredTokenError: signature valid but past exp
        InvalidTokenError: bad signature, malformed token or missing claims
    """
    if not token:
        raise InvalidTokenError()

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise ExpiredTokenError()
    except JWTError:
        raise InvalidTokenError()

    user_id = payload.get("id")
    username = payload.get("username")
    role = payload.get("role")
    exp = payload.get("exp")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not username or not role or exp is None:
        raise InvalidTokenError()

    iat = payload.get("iat", exp)
    return TokenClaims(
        id=user_id,
        username=username,
        role=role,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
