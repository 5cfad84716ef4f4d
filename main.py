"""User accounts service - registration, activation and token sessions."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from accounts.config import get_settings
from accounts.database import SessionLocal
from accounts.errors import AccountsError, ValidationError
from accounts.models.token import Token  # noqa: F401
from accounts.models.user import User  # noqa: F401
from accounts.routers import auth_router, users_router
from accounts.services.sweeper import TokenSweeper
from accounts.services.token_store import get_token_store
from accounts.services.users import get_user_service

# Logging
logger = logging.getLogger("accounts")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()
for warning in settings.validate():
    logger.warning("Config: %s", warning)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the token sweeper on startup and stop it on shutdown."""
    if settings.SEED_USERS > 0:
        db = SessionLocal()
        try:
            seeded = get_user_service().seed_users(db, settings.SEED_USERS)
            logger.info("Seeded %d development user(s)", len(seeded))
        finally:
            db.close()

    sweeper = TokenSweeper(
        store=get_token_store(),
        session_factory=SessionLocal,
        interval_seconds=settings.TOKEN_SWEEP_INTERVAL_SECONDS,
    )
    app.state.token_sweeper = sweeper
    if settings.TOKEN_SWEEP_ENABLED:
        await sweeper.start()

    yield

    await sweeper.stop()


app = FastAPI(title="Accounts", version="0.1.0", lifespan=lifespan)


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = 64 * 1024  # account payloads are tiny JSON documents

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.MAX_BODY_SIZE:
            return JSONResponse(status_code=413, content=error_body(request, "Request body too large."))
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PREFIXES = ("/api/1.0/users", "/api/1.0/user/password", "/api/1.0/auth", "/api/1.0/logout")

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log account-changing operations
        path = request.url.path
        method = request.method
        if method in ("POST", "PUT", "DELETE") and path.startswith(self.AUDIT_PREFIXES):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(AuditLogMiddleware)

# API routers
app.include_router(auth_router)
app.include_router(users_router)


def error_body(request: Request, message: str) -> dict:
    """Standard error payload: request path, epoch-millisecond timestamp and message."""
    return {
        "path": request.url.path,
        "timestamp": int(time.time() * 1000),
        "message": message,
    }


# --- Domain error handlers ---
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Field validation failures carry a validationErrors map."""
    content = error_body(request, exc.message)
    content["validationErrors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(AccountsError)
async def accounts_error_handler(request: Request, exc: AccountsError) -> JSONResponse:
    """Map domain errors to their status codes."""
    if exc.status_code >= 500:
        logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(request, exc.message))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters become 400 validation errors keyed by field."""
    validation_errors = {}
    for error in exc.errors():
        loc = error.get("loc") or ("request",)
        validation_errors[str(loc[-1])] = error.get("msg", "Invalid value.")
    content = error_body(request, "Validation Failure.")
    content["validationErrors"] = validation_errors
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and disallowed methods use the same error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Persistence and hashing errors end up here with a generic message."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body(request, "Internal server error."))


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "accounts", "version": "0.1.0"}
