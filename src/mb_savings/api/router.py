"""mb_savings REST API: lock, confirm, withdraw, list. All require JWT."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.database import get_db_session
from src.mb_common.principal import Principal
from src.mb_common.response import ApiResponse, success_response
from src.mb_gateway.auth.dependencies import get_current_principal
from src.mb_savings.application.schemas import InitiateLockRequest
from src.mb_savings.application.service import SavingsApplicationService

router = APIRouter(prefix="/savings", tags=["savings"])

_service = SavingsApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def initiate_lock(
    body: InitiateLockRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.initiate_lock(db, principal, body)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_savings(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_savings(db, principal)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{saving_id}/confirm")
async def confirm_lock(
    saving_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.confirm_lock(db, principal, str(saving_id))
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{saving_id}/withdraw")
async def withdraw(
    saving_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.withdraw(db, principal, str(saving_id))
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
