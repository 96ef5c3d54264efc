"""
FastAPI application -- SecretLease API server.

Run locally:
    uvicorn backend.app:app --reload --port 8000

server_start.py creates the schema, seeds and then execs uvicorn.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from backend.database import async_session, get_session, init_db, ping
from backend.routes import admin, auth, config, listings, transactions, users
from backend.security import bearer_token, decode_access_token
from config_env import CORS_ORIGINS, LOG_LEVEL
from domain.errors import MarketplaceError, Unauthorized

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialise database schema
    await init_db()

    from backend.seed import ensure_admin_account

    async with async_session() as session:
        await ensure_admin_account(session)

    yield


app = FastAPI(
    title="SecretLease API",
    version="1.0.0",
    description="Off-market rental listings with manually reviewed memberships",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(listings.router)
app.include_router(transactions.router)
app.include_router(admin.router)
app.include_router(config.router)


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------

def _error_body(exc: MarketplaceError) -> dict:
    return {"detail": exc.message, "code": exc.code, "fields": exc.fields}


def _caller_is_admin(request: Request) -> bool:
    token = bearer_token(request.headers.get("authorization"))
    if not token:
        return False
    try:
        return decode_access_token(token).is_admin
    except Unauthorized:
        return False


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for err in exc.errors():
        # drop the "body"/"query" prefix from the location
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        fields[".".join(loc) or "request"] = err.get("msg", "invalid")
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "code": "validation_error", "fields": fields},
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"detail": "Internal server error", "code": "internal_error", "fields": {}}
    # diagnostic detail only for admins
    if _caller_is_admin(request):
        content["error"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=500, content=content)


@app.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    """Health check endpoint."""
    db_ok = False
    try:
        db_ok = await ping(session)
    except Exception as e:
        logger.warning("Database ping failed: %s", e)

    return {
        "status": "ok" if db_ok else "degraded",
        "database": db_ok,
    }
