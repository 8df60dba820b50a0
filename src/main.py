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
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.ps_account.api.router import router as account_router
from src.ps_common.database import engine
from src.ps_common.errors import AppError
from src.ps_common.response import error_response
from src.ps_events.api.router import router as events_router
from src.ps_gateway.middleware.request_log import RequestLogMiddleware
from src.ps_prediction.api.router import router as prediction_router
from src.ps_reputation.api.router import router as reputation_router
from src.ps_settlement.api.router import router as settlement_router
from src.ps_stake.api.router import router as stake_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB connection. Shutdown: dispose the pool."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(account_router, prefix="/api/v1")
app.include_router(prediction_router, prefix="/api/v1")
app.include_router(stake_router, prefix="/api/v1")
app.include_router(settlement_router, prefix="/api/v1")
app.include_router(events_router, prefix="/api/v1")
app.include_router(reputation_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
