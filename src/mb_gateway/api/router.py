"""mb_gateway REST API: email-first register/login, token refresh, caller profile."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.database import get_db_session
from src.mb_common.principal import Principal
from src.mb_common.response import ApiResponse, success_response
from src.mb_gateway.auth.dependencies import get_current_principal
from src.mb_gateway.user.schemas import LoginRequest, RefreshRequest, RegisterRequest
from src.mb_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])

_service = UserService()


def _envelope(request: Request, data: BaseModel, message: str = "success") -> ApiResponse:
    resp = success_response(data.model_dump(mode="json"))
    resp.message = message
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return _envelope(request, await _service.register(db, body), "User registered")


@router.post("/login")
async def login(
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return _envelope(request, await _service.login(db, body.email, body.password))


@router.post("/refresh")
async def refresh(
    body: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return _envelope(request, await _service.refresh(db, body.refresh_token))


@router.get("/me")
async def me(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return _envelope(request, await _service.profile(db, principal))
