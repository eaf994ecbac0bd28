"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Account
  3xxx: Payment
  4xxx: Transaction
  5xxx: Position
  9xxx: System
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        errors: list[str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.errors = errors
        self.headers = headers
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 400)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 400)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(
            1005,
            "Invalid or expired token",
            401,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AccountLockedError(AppError):
    def __init__(self, minutes: int) -> None:
        super().__init__(
            1006,
            f"Account is temporarily locked. Please try again in {minutes} minute(s)",
            429,
            headers={"Retry-After": str(minutes * 60)},
        )


# --- 2xxx: Account ---

class InsufficientFundsError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            400,
        )


class AccountNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Account not found for user {user_id}", 404)


class BalanceLimitError(AppError):
    def __init__(self, amount: Decimal) -> None:
        super().__init__(2003, f"Credit of {amount} would exceed the maximum balance", 400)


# --- 3xxx: Payment ---

class PaymentProviderError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3001, f"Payment provider error: {detail}", 502)


class WebhookSignatureError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"Webhook Error: {detail}", 400)


class PaymentForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(3003, "Unauthorized", 403)


class PaymentNotConfiguredError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "Payments are not configured", 503)


class InvalidPaymentAmountError(AppError):
    def __init__(self, raw: object) -> None:
        super().__init__(3005, f"Invalid payment amount: {raw!r}", 400)


# --- 4xxx: Transaction ---

class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(4004, f"Transaction not found: {transaction_id}", 404)


# --- 5xxx: Position ---

class InsufficientHoldingsError(AppError):
    def __init__(self, crypto_id: str, required: Decimal, held: Decimal) -> None:
        super().__init__(
            5001,
            f"Insufficient coins in portfolio: {crypto_id} required {required}, held {held}",
            400,
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self, retry_after: int, message: str = "Too many requests. Please try again later.") -> None:
        super().__init__(
            9001,
            message,
            429,
            headers={"Retry-After": str(retry_after)},
        )


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ValidationError(AppError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__(9003, "Validation failed", 400, errors=errors)


class ConcurrentUpdateError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9004, f"Concurrent update detected: {detail}", 409)
