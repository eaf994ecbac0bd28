"""Auth API router: register, login, me.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_common.database import get_db_session
from src.pt_common.response import ApiResponse, success_response
from src.pt_gateway.auth.dependencies import get_current_user
from src.pt_gateway.auth.jwt_handler import access_token_ttl_seconds
from src.pt_gateway.middleware.rate_limit import client_ip
from src.pt_gateway.middleware.request_log import get_request_id
from src.pt_gateway.user.db_models import UserModel
from src.pt_gateway.user.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserInfo,
)
from src.pt_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


def _auth_payload(user: UserModel, token: str) -> dict:
    data = AuthResponse(
        token=token,
        expires_in=access_token_ttl_seconds(),
        user=UserInfo(
            id=str(user.id),
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        ),
    )
    return data.to_wire()


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User registration",
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        user, token = await _service.register(body, db)

    resp = success_response(_auth_payload(user, token), message="User registered successfully")
    resp.request_id = get_request_id(request)
    return resp


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User login",
)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, token = await _service.login(body.email, body.password, client_ip(request), db)

    resp = success_response(_auth_payload(user, token), message="Login successful")
    resp.request_id = get_request_id(request)
    return resp


@router.get("/me", response_model=ApiResponse, summary="Current user with balance")
async def me(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.me(current_user, db)
    resp = success_response(data.to_wire())
    resp.request_id = get_request_id(request)
    return resp
