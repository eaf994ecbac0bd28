"""Portfolio REST API: 2 endpoints, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_account.application.service import PortfolioService
from src.pt_common.database import get_db_session
from src.pt_common.response import ApiResponse, success_response
from src.pt_gateway.auth.dependencies import get_current_user
from src.pt_gateway.middleware.request_log import get_request_id
from src.pt_gateway.user.db_models import UserModel

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

_service = PortfolioService()


@router.get("")
async def get_portfolio(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_portfolio(db, str(current_user.id))
    resp = success_response(data.to_wire())
    resp.request_id = get_request_id(request)
    return resp


@router.get("/summary")
async def get_portfolio_summary(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_summary(db, str(current_user.id))
    resp = success_response(data.to_wire())
    resp.request_id = get_request_id(request)
    return resp

