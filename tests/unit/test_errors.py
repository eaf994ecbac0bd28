"""Tests for pt_common.errors and pt_common.response."""

from decimal import Decimal

from src.pt_common.errors import (
    AccountLockedError,
    AppError,
    ConcurrentUpdateError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    InvalidTokenError,
    PaymentForbiddenError,
    RateLimitError,
    ValidationError,
    WebhookSignatureError,
)
from src.pt_common.response import ApiResponse, CamelModel, Money, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.errors is None
        assert err.headers is None

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_insufficient_funds(self) -> None:
        err = InsufficientFundsError(required=Decimal("180"), available=Decimal("40"))
        assert err.code == 2001
        assert err.http_status == 400
        assert "180" in err.message
        assert "40" in err.message

    def test_insufficient_holdings_mentions_portfolio(self) -> None:
        err = InsufficientHoldingsError("bitcoin", Decimal("2"), Decimal("1"))
        assert err.code == 5001
        assert err.http_status == 400
        assert err.message.startswith("Insufficient coins in portfolio")

    def test_invalid_token_sets_www_authenticate(self) -> None:
        err = InvalidTokenError()
        assert err.http_status == 401
        assert err.headers == {"WWW-Authenticate": "Bearer"}

    def test_account_locked_retry_after(self) -> None:
        err = AccountLockedError(minutes=15)
        assert err.http_status == 429
        assert err.headers == {"Retry-After": "900"}
        assert "15 minute(s)" in err.message

    def test_rate_limit_custom_message(self) -> None:
        err = RateLimitError(retry_after=30, message="slow down")
        assert err.code == 9001
        assert err.message == "slow down"
        assert err.headers == {"Retry-After": "30"}

    def test_validation_error_carries_messages(self) -> None:
        err = ValidationError(["a", "b"])
        assert err.code == 9003
        assert err.http_status == 400
        assert err.errors == ["a", "b"]

    def test_webhook_signature_prefix(self) -> None:
        assert WebhookSignatureError("bad sig").message == "Webhook Error: bad sig"

    def test_payment_forbidden(self) -> None:
        err = PaymentForbiddenError()
        assert (err.code, err.http_status, err.message) == (3003, 403, "Unauthorized")

    def test_concurrent_update(self) -> None:
        assert ConcurrentUpdateError("x").http_status == 409


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response(data={"key": "value"})
        assert resp.success is True
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"key": "value"}
        assert resp.errors is None
        assert resp.request_id.startswith("req_")

    def test_error_response(self) -> None:
        resp = error_response(9003, "Validation failed", ["amount: too small"])
        assert resp.success is False
        assert resp.code == 9003
        assert resp.data is None
        assert resp.errors == ["amount: too small"]

    def test_timestamp_is_iso(self) -> None:
        assert "T" in ApiResponse().timestamp


class _Sample(CamelModel):
    crypto_id: str
    total_value: Money


class TestCamelModel:
    def test_wire_is_camel_case_with_numeric_money(self) -> None:
        sample = _Sample(crypto_id="bitcoin", total_value=Decimal("180.00000000"))
        assert sample.to_wire() == {"cryptoId": "bitcoin", "totalValue": 180.0}

    def test_accepts_snake_and_camel_input(self) -> None:
        assert _Sample(cryptoId="eth", totalValue="1").crypto_id == "eth"
        assert _Sample(crypto_id="eth", total_value="1").total_value == Decimal("1")
