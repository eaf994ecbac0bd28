"""Transactions REST API: list, create (buy/sell), get. JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_common.database import get_db_session
from src.pt_common.enums import TransactionType
from src.pt_common.response import ApiResponse, success_response
from src.pt_gateway.auth.dependencies import get_current_user
from src.pt_gateway.middleware.request_log import get_request_id
from src.pt_gateway.user.db_models import UserModel
from src.pt_transaction.application.schemas import (
    CreateTransactionRequest,
    CreateTransactionResponse,
    TransactionResponse,
)
from src.pt_transaction.application.service import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])

_service = TransactionService()


@router.get("")
async def list_transactions(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    crypto_id: str | None = Query(None, alias="cryptoId"),
    type: TransactionType | None = Query(None),  # noqa: A002
    limit: int = Query(50, ge=1, le=100),
    page: int = Query(1, ge=1),
) -> ApiResponse:
    data = await _service.list_transactions(
        db,
        str(current_user.id),
        crypto_id,
        type.value if type else None,
        limit,
        page,
    )
    resp = success_response(data.to_wire())
    resp.request_id = get_request_id(request)
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: CreateTransactionRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.execute_order(db, str(current_user.id), body.to_domain())
    data = CreateTransactionResponse(
        transaction=TransactionResponse.from_domain(result.entry),
        new_balance=result.new_balance,
    )
    resp = success_response(data.to_wire(), message="Transaction created successfully")
    resp.request_id = get_request_id(request)
    return resp


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_transaction(db, str(current_user.id), transaction_id)
    resp = success_response(data.to_wire())
    resp.request_id = get_request_id(request)
    return resp
