"""Account and session endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.tr_account.application.schemas import (
    BalanceResponse,
    ConnectRequest,
    SessionResponse,
)
from src.tr_common.response import ApiResponse, success_response
from src.tr_engine.core import EngineCore
from src.tr_gateway.api.dependencies import get_engine

router = APIRouter(prefix="/account", tags=["account"])


def _session_payload(engine: EngineCore) -> dict:
    return SessionResponse.from_domain(engine.session, engine.simulation).model_dump()


@router.get("/session")
async def get_session(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    return success_response(_session_payload(engine), request)


@router.get("/balance")
async def get_balance(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    balance = await engine.balance()
    data = BalanceResponse.from_amount(engine.sessions.require_address(), balance)
    return success_response(data.model_dump(), request)


@router.post("/connect")
async def connect(
    body: ConnectRequest,
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    await engine.connect(body.address)
    return success_response(_session_payload(engine), request)


@router.post("/connect-demo")
async def connect_demo(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    await engine.connect_demo()
    return success_response(_session_payload(engine), request)


@router.post("/disconnect")
async def disconnect(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    await engine.disconnect()
    return success_response(_session_payload(engine), request)


@router.post("/reset-demo")
async def reset_demo(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    await engine.reset_demo()
    return success_response(_session_payload(engine), request)
