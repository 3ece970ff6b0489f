"""UserService: credentials in, Principal-bearing tokens out.

Users are keyed by their normalized email, the same string the transfer core
matches as sender/recipient/payer identity. Registering does not connect any
funding account; that happens through /accounts.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mb_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from src.mb_common.ids import is_uuid
from src.mb_common.principal import Principal, normalize_identity
from src.mb_common.unit_of_work import unit_of_work
from src.mb_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.mb_gateway.auth.password import hash_password, spend_verify_time, verify_password
from src.mb_gateway.user.db_models import UserModel
from src.mb_gateway.user.schemas import (
    LoginResponse,
    RefreshResponse,
    RegisterRequest,
    UserProfile,
)

logger = logging.getLogger(__name__)


def _profile(user: UserModel) -> UserProfile:
    return UserProfile(
        user_id=str(user.id),
        email=user.email,
        display_name=user.display_name,
        created_at=user.created_at,
    )


class UserService:
    async def find(self, db: AsyncSession, user_id: str | None) -> UserModel | None:
        if not user_id or not is_uuid(user_id):
            return None
        return await db.get(UserModel, uuid.UUID(user_id))

    async def find_by_email(self, db: AsyncSession, email: str) -> UserModel | None:
        result = await db.execute(
            select(UserModel).where(UserModel.email == normalize_identity(email))
        )
        return result.scalar_one_or_none()

    async def active_user(
        self, db: AsyncSession, user_id: str | None, missing: Exception
    ) -> UserModel:
        """Load a user that may act; ``missing`` is raised when there is none."""
        user = await self.find(db, user_id)
        if user is None:
            raise missing
        if not user.is_active:
            raise AccountDisabledError()
        return user

    async def register(self, db: AsyncSession, body: RegisterRequest) -> UserProfile:
        async with unit_of_work(db):
            if await self.find_by_email(db, body.email) is not None:
                raise EmailExistsError()
            user = UserModel(
                email=body.email,
                display_name=body.display_name,
                password_hash=hash_password(body.password),
                is_active=True,
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError:
                # concurrent registration of the same email won the unique index
                raise EmailExistsError() from None
        logger.info("User registered: id=%s", user.id)
        return _profile(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResponse:
        """Unknown email and wrong password fail identically, in time as well as kind."""
        user = await self.find_by_email(db, email)
        if user is None:
            spend_verify_time(password)
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountDisabledError()

        principal = user.principal()
        logger.info("User logged in: id=%s", principal.user_id)
        return LoginResponse(
            access_token=create_access_token(principal.user_id, principal.email),
            refresh_token=create_refresh_token(principal.user_id),
            expires_in=settings.JWT_EXPIRE_MINUTES * 60,
            user=_profile(user),
        )

    async def refresh(self, db: AsyncSession, refresh_token: str) -> RefreshResponse:
        """Re-reads the user, so a disabled or deleted user stops refreshing."""
        claims = decode_token(refresh_token, expected_type="refresh")
        user = await self.active_user(db, claims.get("sub"), InvalidRefreshTokenError())
        return RefreshResponse(
            access_token=create_access_token(str(user.id), user.email),
            expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        )

    async def profile(self, db: AsyncSession, principal: Principal) -> UserProfile:
        user = await self.active_user(db, principal.user_id, InvalidCredentialsError())
        return _profile(user)
