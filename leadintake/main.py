import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from leadintake.api.v1.router import router as api_v1_router
from leadintake.core.config import settings as app_settings
from leadintake.core.database import engine
from leadintake.core.exceptions import (
    ChannelNotSupportedError,
    DuplicateRecordNotFoundError,
    EmailDeliveryError,
    LeadNotFoundError,
    MessageNotDraftError,
    MessageNotFoundError,
)
from leadintake.core.rate_limit import limiter

# Configure logging
logging.basicConfig(level=app_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Lead intake service starting")
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="Lead Intake Service",
    description="Partner lead intake, duplicate detection and intro messaging",
    version="0.1.0",
    lifespan=lifespan,
)

# Attach rate limiter state so slowapi can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware – restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


def _error(status_code: int, error: str, error_type: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "type": error_type, **extra},
    )


@app.exception_handler(LeadNotFoundError)
async def lead_not_found_handler(request: Request, exc: LeadNotFoundError):
    logger.warning("Lead not found: %s", exc.detail)
    return _error(404, exc.detail, "lead_not_found")


@app.exception_handler(MessageNotFoundError)
async def message_not_found_handler(request: Request, exc: MessageNotFoundError):
    logger.warning("Message not found: %s", exc.detail)
    return _error(404, exc.detail, "message_not_found")


@app.exception_handler(DuplicateRecordNotFoundError)
async def duplicate_record_not_found_handler(
    request: Request, exc: DuplicateRecordNotFoundError
):
    logger.warning("Duplicate record not found: %s", exc.detail)
    return _error(404, exc.detail, "duplicate_record_not_found")


@app.exception_handler(MessageNotDraftError)
async def message_not_draft_handler(request: Request, exc: MessageNotDraftError):
    logger.warning("Send rejected: %s", exc.detail)
    return _error(400, exc.detail, "message_not_draft")


@app.exception_handler(ChannelNotSupportedError)
async def channel_not_supported_handler(
    request: Request, exc: ChannelNotSupportedError
):
    logger.warning("Send rejected: %s", exc.detail)
    return _error(400, exc.detail, "channel_not_supported")


@app.exception_handler(EmailDeliveryError)
async def email_delivery_handler(request: Request, exc: EmailDeliveryError):
    logger.error("Email delivery failed: %s", exc.detail)
    return _error(500, exc.detail, "email_delivery_failed")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    return _error(
        400,
        "Validation failed",
        "validation_error",
        details=jsonable_encoder(exc.errors()),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return _error(
        500,
        "An unexpected internal error occurred. Please try again later.",
        "internal_server_error",
    )
