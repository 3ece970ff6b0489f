"""``get_current_principal``: bearer token to the Principal core operations take.

The email in the Principal is read from the users row, not the token, so the
identity a caller acts under is always the stored, normalized one.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.database import get_db_session
from src.mb_common.errors import InvalidCredentialsError
from src.mb_common.principal import Principal
from src.mb_gateway.auth.jwt_handler import decode_token
from src.mb_gateway.user.service import UserService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_users = UserService()


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Principal:
    """401 for a bad token or unknown user, USER_DISABLED (403) for a disabled one."""
    try:
        claims = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _unauthorized() from None
    user = await _users.active_user(db, claims.get("sub"), _unauthorized())
    return user.principal()
