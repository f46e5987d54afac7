from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

import jwt
from jwt import ExpiredSignatureError
from jwt import InvalidTokenError as PyJWTInvalidTokenError
from passlib.context import CryptContext


class TokenType(str, Enum):
    ACCESS = "access"


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__truncate_error=True,
)

ALGORITHM = "HS256"


class TokenValidationError(Exception):
    """Raised when a token cannot be validated."""


class TokenExpiredError(TokenValidationError):
    """Raised when a token is expired."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def random_password_hash() -> str:
    """Hash of a random password, for accounts that only ever sign in through OAuth."""
    return hash_password(secrets.token_hex(16))


def create_access_token(subject: str, secret: str, expires_minutes: int = 60 * 24) -> str:
    return _create_token(subject, secret, timedelta(minutes=expires_minutes), TokenType.ACCESS)


def decode_token(token: str, secret: str, expected_type: TokenType = TokenType.ACCESS) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpiredError("Token has expired") from exc
    except PyJWTInvalidTokenError as exc:
        raise TokenValidationError("Token is invalid") from exc
    token_type = payload.get("type", TokenType.ACCESS.value)
    if token_type != expected_type.value:
        raise TokenValidationError("Token type mismatch")
    return payload


def _create_token(subject: str, secret: str, delta: timedelta, token_type: TokenType) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": now,
        "exp": now + delta,
        "type": token_type.value,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


class AccessTokenIssuer:
    """Issues and reads the customer access tokens handed out after an OAuth login."""

    def __init__(self, secret: str, expires_minutes: int = 60 * 24):
        self.secret = secret
        self.expires_minutes = expires_minutes

    def issue(self, customer_id: int) -> str:
        return create_access_token(str(customer_id), self.secret, self.expires_minutes)

    def customer_id(self, token: str) -> int:
        payload = decode_token(token, self.secret)
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenValidationError("Token subject is not a customer id") from exc
