"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from src.pt_account.api.router import router as portfolio_router
from src.pt_common.database import engine, ping_database
from src.pt_common.errors import AppError, InternalError, ValidationError
from src.pt_common.redis_client import close_redis, ping_redis
from src.pt_common.response import error_response
from src.pt_gateway.api.router import router as auth_router
from src.pt_gateway.middleware.rate_limit import RateLimitMiddleware
from src.pt_gateway.middleware.request_log import RequestLogMiddleware, get_request_id
from src.pt_gateway.middleware.security_headers import SecurityHeadersMiddleware
from src.pt_payment.api.router import router as payment_router
from src.pt_transaction.api.router import router as transaction_router

logger = logging.getLogger("pt")

API_PREFIX = "/api"
VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("pt").setLevel(settings.LOG_LEVEL)
    logging.getLogger("src").setLevel(settings.LOG_LEVEL)
    await ping_database()
    await ping_redis()
    if not settings.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY not set; payment endpoints will return 503")
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version=VERSION,
    lifespan=lifespan,
)

# Last added runs first: request log → security headers → CORS → rate limit
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLogMiddleware)


def _envelope(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.errors)
    resp.request_id = get_request_id(request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
        headers=exc.headers,
    )


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return messages


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _envelope(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(request, ValidationError(_validation_messages(exc)))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    err = AppError(exc.status_code, str(exc.detail), exc.status_code, headers=exc.headers)
    return _envelope(request, err)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(request, InternalError())


app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(portfolio_router, prefix=API_PREFIX)
app.include_router(transaction_router, prefix=API_PREFIX)
app.include_router(payment_router, prefix=API_PREFIX)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": VERSION}
