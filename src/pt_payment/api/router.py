"""Payments REST API.

create-payment-intent, payment-status and confirm-payment require JWT auth.
The webhook is authenticated by the provider signature instead and reads the
raw body, which signature verification needs byte-for-byte.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_common.database import get_db_session
from src.pt_common.response import ApiResponse, success_response
from src.pt_gateway.auth.dependencies import get_current_user
from src.pt_gateway.middleware.request_log import get_request_id
from src.pt_gateway.user.db_models import UserModel
from src.pt_payment.application.schemas import (
    ConfirmPaymentRequest,
    CreatePaymentIntentRequest,
)
from src.pt_payment.application.service import DepositService

router = APIRouter(prefix="/payments", tags=["payments"])

_service = DepositService()


@router.post("/create-payment-intent")
async def create_payment_intent(
    body: CreatePaymentIntentRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_deposit_intent(str(current_user.id), body.amount)
    resp = success_response(data.to_wire())
    resp.request_id = get_request_id(request)
    return resp


@router.get("/payment-status")
async def payment_status(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    payment_intent_id: str = Query(..., alias="paymentIntentId", min_length=1),
) -> ApiResponse:
    data = await _service.poll_deposit_status(db, str(current_user.id), payment_intent_id)
    resp = success_response(data.to_wire())
    resp.request_id = get_request_id(request)
    return resp


@router.post("/confirm-payment")
async def confirm_payment(
    body: ConfirmPaymentRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    request: Request,
) -> ApiResponse:
    data = await _service.confirm_payment(str(current_user.id), body.payment_intent_id)
    resp = success_response(data.to_wire())
    resp.request_id = get_request_id(request)
    return resp


@router.post("/webhook", include_in_schema=False)
async def webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    stripe_signature: Annotated[str, Header(alias="Stripe-Signature")] = "",
) -> ApiResponse:
    payload = await request.body()
    await _service.on_provider_webhook(db, payload, stripe_signature)
    return success_response({"received": True})
