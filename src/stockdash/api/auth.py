"""Authentication utilities: password hashing and stateless JWT bearer tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt as _bcrypt
from jose import JWTError, jwt
from starlette.requests import Request

from stockdash.errors import InvalidToken, Unauthenticated

ALGORITHM = "HS256"
COOKIE_NAME = "token"


@dataclass(frozen=True)
class TokenPayload:
    user_id: int


def hash_password(plain: str) -> str:
    return _bcrypt.hashpw(plain.encode(), _bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plaintext password against a bcrypt hash."""
    if not hashed:
        return False
    try:
        return _bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        return False


def create_token(user_id: int, secret: str, expiry_hours: int) -> str:
    """Create a signed JWT carrying the user id and an expiration claim."""
    exp = datetime.now(timezone.utc) + timedelta(hours=expiry_hours)
    return jwt.encode({"sub": str(user_id), "exp": exp}, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> TokenPayload:
    """Verify signature and expiry. Raises InvalidToken on any failure."""
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError as e:
        raise InvalidToken() from e
    try:
        return TokenPayload(user_id=int(claims["sub"]))
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidToken() from e


def extract_token(request: Request) -> str | None:
    """Bearer token from the Authorization header, else the ``token`` cookie.

    The header wins when both are present.
    """
    header = request.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(COOKIE_NAME) or None


def authenticate(request: Request, secret: str) -> TokenPayload:
    token = extract_token(request)
    if not token:
        raise Unauthenticated()
    return decode_token(token, secret)
