"""Bearer tokens for the auth boundary (python-jose, HS256 shared secret).

Access tokens carry ``sub`` (user id) and ``email`` (the payment identity at
mint time; get_current_principal re-reads it from the row). Refresh tokens
carry only ``sub``. Every token has ``type``, ``iss`` and a random ``jti``.

A wrong signature, issuer or type, a missing subject, or expiry all reject the
token; failures on access tokens and refresh tokens map to different kinds.
No revocation list: a token stays valid until ``exp``.
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

from jose import JWTError, jwt

from config.settings import settings
from src.mb_common.errors import AppError, InvalidCredentialsError, InvalidRefreshTokenError

ISSUER = "moneybuddy-core"

TokenType = Literal["access", "refresh"]

_ACCESS_LIFETIME = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_LIFETIME = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)

_REJECTED: dict[str, type[AppError]] = {
    "access": InvalidCredentialsError,
    "refresh": InvalidRefreshTokenError,
}


def _mint(token_type: TokenType, subject: str, lifetime: timedelta, **extra: str) -> str:
    now = datetime.now(UTC)
    claims: dict[str, Any] = {
        "sub": subject,
        "type": token_type,
        "iss": ISSUER,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
        **extra,
    }
    return str(jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


def create_access_token(user_id: str, email: str) -> str:
    return _mint("access", user_id, _ACCESS_LIFETIME, email=email)


def create_refresh_token(user_id: str) -> str:
    return _mint("refresh", user_id, _REFRESH_LIFETIME)


def decode_token(token: str, expected_type: TokenType) -> dict[str, Any]:
    rejected = _REJECTED[expected_type]
    try:
        claims = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM], issuer=ISSUER
        )
    except JWTError:
        raise rejected() from None
    if claims.get("type") != expected_type or not claims.get("sub"):
        raise rejected()
    return claims
