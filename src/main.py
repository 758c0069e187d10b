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

from config.settings import settings
from src.tr_account.api.router import router as account_router
from src.tr_bet.api.router import router as bet_router
from src.tr_common.errors import AppError
from src.tr_common.response import error_response
from src.tr_engine.factory import build_engine
from src.tr_engine.ticker import RoundTicker
from src.tr_gateway.middleware.request_log import RequestLogMiddleware
from src.tr_round.api.router import router as round_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: load engine state, start the ticker. Shutdown: stop it."""
    engine = app.state.engine
    await engine.initialize()
    ticker: RoundTicker | None = None
    if settings.TICKER_ENABLED:
        ticker = RoundTicker(
            engine,
            tick_interval=settings.TICK_DURATION_MS / 1000,
            price_interval=settings.PRICE_REFRESH_SECONDS,
        )
        ticker.start()
    yield
    if ticker is not None:
        await ticker.stop()
    await engine.close()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)
app.state.engine = build_engine(settings)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(round_router, prefix="/api/v1")
app.include_router(bet_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    mode = "simulation" if app.state.engine.simulation else "ledger"
    return {"status": "ok", "version": "0.1.0", "mode": mode}
