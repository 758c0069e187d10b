"""Price and round endpoints: read-only, no session required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from config.settings import settings
from src.tr_common.errors import InvalidRoundError
from src.tr_common.response import ApiResponse, success_response
from src.tr_engine.core import EngineCore
from src.tr_gateway.api.dependencies import get_engine
from src.tr_price.application.schemas import PriceResponse
from src.tr_round.application.schemas import (
    CurrentRoundResponse,
    RoundHistoryResponse,
    RoundResponse,
)

router = APIRouter(tags=["rounds"])


@router.get("/price")
async def get_price(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    snapshot = await engine.price()
    return success_response(PriceResponse.from_snapshot(snapshot).model_dump(), request)


@router.get("/rounds/current")
async def get_current_round(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    round_ = await engine.current_round()
    tick = engine.clock.last_tick
    data = CurrentRoundResponse(
        **RoundResponse.from_domain(round_).model_dump(),
        current_tick=tick,
        ticks_remaining=engine.clock.ticks_remaining(round_.id, tick),
    )
    return success_response(data.model_dump(), request)


@router.get("/rounds/history")
async def get_rounds_history(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
    limit: int = Query(settings.ROUNDS_HISTORY_LIMIT, ge=1, le=100),
) -> ApiResponse:
    rounds = await engine.rounds_history(limit)
    data = RoundHistoryResponse(items=[RoundResponse.from_domain(r) for r in rounds])
    return success_response(data.model_dump(), request)


@router.get("/rounds/{round_id}")
async def get_round(
    round_id: int,
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    if round_id < 0:
        raise InvalidRoundError(round_id)
    round_ = await engine.get_round(round_id)
    return success_response(RoundResponse.from_domain(round_).model_dump(), request)
