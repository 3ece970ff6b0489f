"""mb_transfer REST API: sends, requests, claims and history. All require JWT."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.database import get_db_session
from src.mb_common.principal import Principal
from src.mb_common.response import ApiResponse, success_response
from src.mb_gateway.auth.dependencies import get_current_principal
from src.mb_transfer.application.schemas import (
    ApproveRequest,
    ClaimRequest,
    MoneyRequestRequest,
    SendRequest,
)
from src.mb_transfer.application.service import TransferApplicationService

router = APIRouter(prefix="/transfers", tags=["transfers"])

_service = TransferApplicationService()


def _wrap(data: dict, request: Request) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/send", status_code=status.HTTP_201_CREATED)
async def create_send(
    body: SendRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.send(db, principal, body)
    return _wrap(data.model_dump(mode="json"), request)


@router.post("/request", status_code=status.HTTP_201_CREATED)
async def create_request(
    body: MoneyRequestRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.request_money(db, principal, body)
    return _wrap(data.model_dump(mode="json"), request)


@router.post("/{transaction_id}/claim")
async def claim(
    transaction_id: UUID,
    body: ClaimRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.claim(db, principal, str(transaction_id), body)
    return _wrap(data.model_dump(mode="json"), request)


@router.post("/{transaction_id}/approve")
async def approve(
    transaction_id: UUID,
    body: ApproveRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.approve(db, principal, str(transaction_id), body)
    return _wrap(data.model_dump(mode="json"), request)


@router.post("/{transaction_id}/decline")
async def decline(
    transaction_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.decline(db, principal, str(transaction_id))
    return _wrap(data.model_dump(mode="json"), request)


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_transaction(db, principal, str(transaction_id))
    return _wrap(data.model_dump(mode="json"), request)


@router.get("")
async def list_history(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_history(db, principal, cursor, limit)
    return _wrap(data.model_dump(mode="json"), request)
